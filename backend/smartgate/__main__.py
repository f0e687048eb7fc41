from smartgate.main import run

run()

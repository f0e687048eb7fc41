"""Smart Gate relay server.

Pairs gate controllers ("devices") with remote monitors ("viewers") inside
short-lived named rooms and relays gate state and open/close commands
between them over WebSockets.
"""

__version__ = "0.1.0"

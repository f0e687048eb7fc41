"""Manual smoke test against a running server: python smoke_gate.py [base_url]"""
import asyncio
import json
import sys
import urllib.request

import websockets

BASE = sys.argv[1] if len(sys.argv) > 1 else "localhost:8080"


async def main():
    # Reserve a fresh room through the REST endpoint
    with urllib.request.urlopen(f"http://{BASE}/api/register?name=smoke") as resp:
        room_id = json.load(resp)["roomId"]
    print(f"Room: {room_id}")

    async with websockets.connect(f"ws://{BASE}/ws?roomId={room_id}&role=device") as device, \
               websockets.connect(f"ws://{BASE}/ws?roomId={room_id}&role=viewer") as viewer:
        print(f"Device: {await device.recv()}")
        print(f"Viewer: {await viewer.recv()}")

        await device.send(json.dumps({"type": "gate_state", "gate": "open"}))
        print(f"Viewer received: {await viewer.recv()}")

        await viewer.send(json.dumps({"type": "command", "action": "close"}))
        print(f"Device received: {await device.recv()}")


if __name__ == "__main__":
    asyncio.run(main())

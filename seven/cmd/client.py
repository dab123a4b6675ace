from __future__ import annotations

import argparse
import asyncio
import itertools
import json
import logging
import uuid

from websockets.asyncio.client import connect

log = logging.getLogger("seven.cmd.client")

DEFAULT_URL = "ws://localhost:8080/register"


async def register_many(url: str, count: int) -> int:
    """Register fresh identities with addresses "1", "2", ...; 0 means forever."""

    sent = 0
    counter = itertools.count(1) if count <= 0 else range(1, count + 1)
    async with connect(url) as ws:
        for n in counter:
            frame = {"uuid": str(uuid.uuid4()), "addr": str(n)}
            await ws.send(json.dumps(frame))
            reply = await ws.recv()
            print(reply)
            sent += 1
    return sent


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Register random peers against a Seven server")
    parser.add_argument("--url", default=DEFAULT_URL, help="register websocket URL")
    parser.add_argument("--count", type=int, default=0, help="number of registrations (0 = forever)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        sent = asyncio.run(register_many(args.url, args.count))
    except KeyboardInterrupt:
        return
    log.info("Sent %d registrations", sent)


if __name__ == "__main__":
    main()

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import signal
from pathlib import Path

from seven.server.config import ServerConfig
from seven.server.runtime import ServerRuntime

log = logging.getLogger("seven.cmd.server")


async def _run(config: ServerConfig) -> None:
    runtime = ServerRuntime(config)
    await runtime.start()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)
    except NotImplementedError:
        pass

    log.info("Server running. Press Ctrl+C to stop.")
    try:
        await stop_event.wait()
    finally:
        await runtime.stop()


def build_config(args: argparse.Namespace) -> ServerConfig:
    config = ServerConfig.load(Path(args.config) if args.config else None)
    overrides = {}
    if args.addr is not None:
        overrides["listen"] = args.addr
    if args.debug is not None:
        overrides["debug"] = args.debug
    return dataclasses.replace(config, **overrides)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seven - a WebRTC signaling server")
    parser.add_argument("--config", help="Path to server YAML config")
    parser.add_argument("--addr", help="http service address (host:port)")
    parser.add_argument("--debug", action=argparse.BooleanOptionalAction, default=None, help="Enable debug")
    args = parser.parse_args(argv)

    config = build_config(args)
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not config.debug:
        logging.getLogger("websockets").setLevel(logging.WARNING)

    asyncio.run(_run(config))


if __name__ == "__main__":
    main()

import argparse
import asyncio
import logging

from showdown.models import GameConfig

from .server import HostServer

logging.basicConfig(level=logging.INFO)


def main() -> None:
    parser = argparse.ArgumentParser(description="Five-card showdown host server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--starting-tokens", type=int, default=100)
    parser.add_argument("--victory-threshold", type=int, default=101)
    parser.add_argument("--bust-threshold", type=int, default=0)
    args = parser.parse_args()

    config = GameConfig(
        starting_tokens=args.starting_tokens,
        victory_threshold=args.victory_threshold,
        bust_threshold=args.bust_threshold,
    )

    server = HostServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()

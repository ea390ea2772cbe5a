import argparse
import asyncio
import logging

from videopoker.models import EngineConfig

from .server import DealerServer


def main() -> None:
    parser = argparse.ArgumentParser(description="Jacks or Better dealer server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--session-ttl", type=float, default=60 * 60, help="Seconds before an unfinished hand expires")
    parser.add_argument("--reap-interval", type=float, default=60, help="Seconds between expired-session sweeps")
    parser.add_argument(
        "--unseeded-shuffle",
        action="store_true",
        help="Shuffle with the OS CSPRNG instead of the seed (decks are then not reproducible by verify)",
    )
    parser.add_argument("--strategy-top", type=int, default=3, help="Number of hold strategies returned")
    parser.add_argument("--debug", action="store_true", help="Enable the stats request")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level))

    config = EngineConfig(
        session_ttl_seconds=args.session_ttl,
        reap_interval_seconds=args.reap_interval,
        seeded_shuffle=not args.unseeded_shuffle,
        strategy_top=args.strategy_top,
        debug=args.debug,
    )

    server = DealerServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()

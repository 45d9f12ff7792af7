import argparse
import asyncio
import logging

from pokerengine.errors import RoundSetupError
from pokerengine.models import TableConfig
from pokerengine.records import JsonLinesRecorder
from pokerengine.variants import variant_names

from .server import TableHost

logging.basicConfig(level=logging.INFO)


def main() -> None:
    parser = argparse.ArgumentParser(description="Poker table host server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--variant", choices=variant_names(), default="texas_holdem")
    parser.add_argument("--seats", type=int, default=6)
    parser.add_argument("--starting-balance", type=int, default=1_000)
    parser.add_argument("--raise-limit", type=int, default=100, help="Largest raise increment per action")
    parser.add_argument("--minimum-bet", type=int, default=10, help="Seven Card Stud bring-in")
    parser.add_argument(
        "--move-time",
        type=int,
        default=15_000,
        help="Move time in milliseconds (0 waits for every decision indefinitely)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed the deck for reproducible rounds")
    parser.add_argument("--record-path", default=None, help="Append turns and rounds as JSON lines to this file")
    parser.add_argument("--rounds", type=int, default=None, help="Stop dealing after this many rounds")
    args = parser.parse_args()

    config = TableConfig(
        variant=args.variant,
        seats=args.seats,
        starting_balance=args.starting_balance,
        raise_limit=args.raise_limit,
        minimum_bet=args.minimum_bet,
        move_time_ms=args.move_time,
    )
    try:
        config.validate()
    except RoundSetupError as exc:
        parser.error(str(exc))

    recorder = JsonLinesRecorder(args.record_path) if args.record_path else None
    server = TableHost(config, recorder=recorder, seed=args.seed, max_rounds=args.rounds)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()

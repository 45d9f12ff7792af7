import argparse
import logging

from .cards import Deck
from .errors import RoundSetupError
from .inputs import ConsoleInput
from .models import Player, TableConfig
from .records import JsonLinesRecorder
from .variants import create_controller, variant_names

logging.basicConfig(level=logging.INFO)


def main() -> None:
    # Hot-seat play in one terminal; every player answers the same prompts.
    parser = argparse.ArgumentParser(description="Play poker rounds at the terminal")
    parser.add_argument("names", nargs="+", help="Player names in seat order")
    parser.add_argument("--variant", choices=variant_names(), default="texas_holdem")
    parser.add_argument("--starting-balance", type=int, default=1_000)
    parser.add_argument("--raise-limit", type=int, default=100)
    parser.add_argument("--minimum-bet", type=int, default=10)
    parser.add_argument("--rounds", type=int, default=1)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--record-path", default=None)
    args = parser.parse_args()

    config = TableConfig(
        variant=args.variant,
        seats=len(args.names),
        starting_balance=args.starting_balance,
        raise_limit=args.raise_limit,
        minimum_bet=args.minimum_bet,
    )
    try:
        controller = create_controller(
            config,
            player_input=ConsoleInput(),
            deck=Deck(args.seed),
            recorder=JsonLinesRecorder(args.record_path) if args.record_path else None,
        )
    except RoundSetupError as exc:
        parser.error(str(exc))

    players = [Player(config.starting_balance, name=name) for name in args.names]
    for number in range(1, args.rounds + 1):
        seated = [player for player in players if player.balance > 0]
        if len(seated) < 2:
            break
        controller.round_id = f"R-{number:05d}"
        controller.play_round(seated)


if __name__ == "__main__":
    main()

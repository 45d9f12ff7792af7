from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Iterable, List, Optional, Protocol, Sequence, Tuple

from .cards import Card, cards_to_labels
from .models import ActionType, Player

LOGGER = logging.getLogger("poker_engine.input")


class PlayerInput(Protocol):
    """Everything the engine needs from whoever is sitting at the table.

    The engine only offers option sets that are legal in the current state
    and only prompts players who can still act. Re-prompting on bad input is
    the implementation's job; the engine rejects illegal answers outright.
    """

    def request_action(self, player: Player, options: Sequence[ActionType]) -> ActionType: ...

    def request_raise_amount(self, player: Player, limit: int) -> int: ...

    def request_replace_cards(self, player: Player) -> List[Card]: ...

    def display_current_player(self, player: Player) -> None: ...

    def display_player_cards(self, player: Player) -> None: ...

    def display_community_cards(self, player: Player, cards: Sequence[Card]) -> None: ...

    def display_up_cards(self, player: Player, others: Sequence[Player]) -> None: ...

    def display_pot(self, amount: int, players: Sequence[Player]) -> None: ...

    def announce_winners(self, winners: Sequence[Player], players: Sequence[Player]) -> None: ...


class SilentDisplay:
    """No-op display half of PlayerInput for inputs that show nothing."""

    def display_current_player(self, player: Player) -> None:
        pass

    def display_player_cards(self, player: Player) -> None:
        pass

    def display_community_cards(self, player: Player, cards: Sequence[Card]) -> None:
        pass

    def display_up_cards(self, player: Player, others: Sequence[Player]) -> None:
        pass

    def display_pot(self, amount: int, players: Sequence[Player]) -> None:
        pass

    def announce_winners(self, winners: Sequence[Player], players: Sequence[Player]) -> None:
        pass


def passive_choice(options: Sequence[ActionType]) -> ActionType:
    # Same preference a timed-out seat gets: check > call > fold.
    for preferred in (ActionType.CHECK, ActionType.CALL):
        if preferred in options:
            return preferred
    return ActionType.FOLD


class PassiveInput(SilentDisplay):
    """Never raises, never draws; checks or calls whenever it can."""

    def request_action(self, player: Player, options: Sequence[ActionType]) -> ActionType:
        return passive_choice(options)

    def request_raise_amount(self, player: Player, limit: int) -> int:
        return 1

    def request_replace_cards(self, player: Player) -> List[Card]:
        return []


class ScriptedInput(SilentDisplay):
    """Replays preset decisions in order; used to drive rounds in tests.

    ``actions`` are answered to ``request_action`` one by one, ``raises`` to
    ``request_raise_amount`` and ``replacements`` (indices into the player's
    hand) to ``request_replace_cards``. Every prompt is logged in ``prompts``
    as ``(player_name, offered_options)`` so tests can assert who was asked
    and what they were offered.
    """

    def __init__(
        self,
        actions: Iterable[ActionType] = (),
        raises: Iterable[int] = (),
        replacements: Iterable[Sequence[int]] = (),
        fallback: Optional[Callable[[Sequence[ActionType]], ActionType]] = None,
    ) -> None:
        self.actions: Deque[ActionType] = deque(actions)
        self.raises: Deque[int] = deque(raises)
        self.replacements: Deque[Sequence[int]] = deque(replacements)
        self.fallback = fallback
        self.prompts: List[Tuple[str, List[ActionType]]] = []
        self.raise_limits: List[int] = []
        self.winners: List[List[str]] = []

    def request_action(self, player: Player, options: Sequence[ActionType]) -> ActionType:
        self.prompts.append((player.name, list(options)))
        if self.actions:
            return self.actions.popleft()
        if self.fallback is not None:
            return self.fallback(options)
        raise RuntimeError(f"Scripted input ran out of actions while prompting {player.name}")

    def request_raise_amount(self, player: Player, limit: int) -> int:
        self.raise_limits.append(limit)
        if not self.raises:
            raise RuntimeError(f"Scripted input ran out of raise amounts for {player.name}")
        return self.raises.popleft()

    def request_replace_cards(self, player: Player) -> List[Card]:
        if not self.replacements:
            return []
        hand = player.hand
        return [hand[idx] for idx in self.replacements.popleft()]

    def announce_winners(self, winners: Sequence[Player], players: Sequence[Player]) -> None:
        self.winners.append([winner.name for winner in winners])


class ConsoleInput:
    """Terminal prompts for hot-seat play. Bad answers are re-prompted."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self.read = read
        self.write = write

    def request_action(self, player: Player, options: Sequence[ActionType]) -> ActionType:
        while True:
            self.write(f"\n{player.name}, select an action:")
            for idx, option in enumerate(options):
                self.write(f"  {idx} - {option.value}")
            choice = self.read("> ").strip()
            if choice.isdigit() and int(choice) < len(options):
                return options[int(choice)]
            by_name = [option for option in options if option.value == choice.upper()]
            if by_name:
                return by_name[0]
            self.write(f"Invalid input, enter a number between 0 and {len(options) - 1}")

    def request_raise_amount(self, player: Player, limit: int) -> int:
        while True:
            choice = self.read(f"Raise by how much? (1-{limit}) > ").strip()
            if choice.isdigit() and 1 <= int(choice) <= limit:
                return int(choice)
            self.write(f"Invalid input, enter a number between 1 and {limit}")

    def request_replace_cards(self, player: Player) -> List[Card]:
        hand = player.hand
        while True:
            self.write("Your cards: " + "  ".join(f"{idx}:{card.label}" for idx, card in enumerate(hand)))
            choice = self.read("Cards to replace (indices separated by spaces, blank to stand pat) > ")
            tokens = choice.split()
            if all(token.isdigit() and int(token) < len(hand) for token in tokens):
                indices = sorted({int(token) for token in tokens})
                return [hand[idx] for idx in indices]
            self.write("Invalid selection")

    def display_current_player(self, player: Player) -> None:
        self.write(f"\n=== {player.name} to act (balance {player.balance}) ===")

    def display_player_cards(self, player: Player) -> None:
        self.write(f"{player.name}'s cards: {' '.join(cards_to_labels(player.hand))}")

    def display_community_cards(self, player: Player, cards: Sequence[Card]) -> None:
        self.write(f"Board: {' '.join(cards_to_labels(cards))}")

    def display_up_cards(self, player: Player, others: Sequence[Player]) -> None:
        for other in others:
            self.write(f"  {other.name} shows {' '.join(cards_to_labels(other.up_cards))}")

    def display_pot(self, amount: int, players: Sequence[Player]) -> None:
        self.write(f"Pot: {amount}")

    def announce_winners(self, winners: Sequence[Player], players: Sequence[Player]) -> None:
        self.write("Winner(s): " + ", ".join(winner.name for winner in winners))
        for player in players:
            self.write(f"  {player.name}: {player.balance}")

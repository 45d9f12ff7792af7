from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from pokerengine.cards import Card, cards_to_labels, parse_label
from pokerengine.inputs import passive_choice
from pokerengine.models import ActionType, Player

if TYPE_CHECKING:
    from .server import TableHost

LOGGER = logging.getLogger("poker_host.remote")


class RemoteInput:
    """PlayerInput that forwards prompts to the seat's WebSocket client.

    Called from the round worker thread. Every prompt blocks until the client
    answers or the move clock runs out; bad or missing answers fall back to
    check > call > fold, the smallest raise and standing pat.
    """

    def __init__(self, host: "TableHost") -> None:
        self.host = host

    def _ask(self, player: Player, kind: str, payload: Dict[str, object]) -> Optional[Dict[str, object]]:
        seat = self.host.seat_for(player)
        if seat is None:
            return None
        return self.host.run_threadsafe(self.host.request_decision(seat, kind, payload))  # type: ignore[return-value]

    def _notify(self, player: Optional[Player], msg_type: str, payload: Dict[str, object]) -> None:
        if player is None:
            self.host.run_threadsafe(self.host.broadcast(msg_type, payload))
            return
        seat = self.host.seat_for(player)
        if seat is not None:
            self.host.run_threadsafe(self.host.send_to(seat, msg_type, payload))

    # Decisions -------------------------------------------------------

    def request_action(self, player: Player, options: Sequence[ActionType]) -> ActionType:
        message = self._ask(player, "act", {
            "options": [option.value for option in options],
            "balance": player.balance,
            "hand": cards_to_labels(player.hand),
        })
        if message is None:
            return passive_choice(options)
        try:
            choice = ActionType(message.get("action"))
        except ValueError:
            choice = None
        if choice not in options:
            LOGGER.warning("Rejected action %r from %s; falling back", message.get("action"), player.name)
            return passive_choice(options)
        return choice

    def request_raise_amount(self, player: Player, limit: int) -> int:
        message = self._ask(player, "raise", {"min": 1, "max": limit})
        amount = message.get("amount") if message else None
        if isinstance(amount, bool) or not isinstance(amount, int) or not 1 <= amount <= limit:
            if message is not None:
                LOGGER.warning("Raise amount %r from %s outside 1-%s; raising by 1", amount, player.name, limit)
            return 1
        return amount

    def request_replace_cards(self, player: Player) -> List[Card]:
        hand = list(player.hand)
        message = self._ask(player, "replace", {"hand": cards_to_labels(hand)})
        labels = message.get("cards") if message else None
        if not isinstance(labels, list):
            return []
        try:
            chosen = [parse_label(label) for label in labels]
        except (TypeError, ValueError):
            LOGGER.warning("Unparseable replace selection %r from %s", labels, player.name)
            return []
        if len(set(chosen)) != len(chosen) or any(card not in hand for card in chosen):
            LOGGER.warning("Replace selection %r from %s is not in hand", labels, player.name)
            return []
        return chosen

    # Notifications ---------------------------------------------------

    def display_current_player(self, player: Player) -> None:
        self._notify(None, "turn", {"seat": self.host.seat_for(player), "name": player.name})

    def display_player_cards(self, player: Player) -> None:
        self._notify(player, "cards", {"hand": cards_to_labels(player.hand)})

    def display_community_cards(self, player: Player, cards: Sequence[Card]) -> None:
        self._notify(player, "cards", {"community": cards_to_labels(cards)})

    def display_up_cards(self, player: Player, others: Sequence[Player]) -> None:
        showing = {str(self.host.seat_for(other)): cards_to_labels(other.up_cards) for other in others}
        self._notify(player, "cards", {"up_cards": showing})

    def display_pot(self, amount: int, players: Sequence[Player]) -> None:
        self._notify(None, "pot", {
            "amount": amount,
            "balances": {str(self.host.seat_for(player)): player.balance for player in players},
        })

    def announce_winners(self, winners: Sequence[Player], players: Sequence[Player]) -> None:
        self._notify(None, "winners", {
            "seats": [self.host.seat_for(winner) for winner in winners],
            "hands": {str(self.host.seat_for(player)): cards_to_labels(player.up_cards) for player in players},
        })

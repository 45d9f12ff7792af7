from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

from .cards import cards_to_labels
from .models import Turn

LOGGER = logging.getLogger("poker_engine.records")


def turn_payload(turn: Turn) -> Dict[str, object]:
    action = turn.action
    return {
        "turn_id": turn.turn_id,
        "round_id": turn.round_id,
        "player_id": turn.player_id,
        "phase": turn.phase,
        "action": action.type.value,
        "amount": action.amount,
        "cards": cards_to_labels(action.cards),
        "hand": cards_to_labels(turn.hand),
    }


class RoundRecorder(Protocol):
    def save_turn(self, turn: Turn) -> None: ...

    def save_round(self, round_id: str, summary: Dict[str, object]) -> None: ...


class NullRecorder:
    def save_turn(self, turn: Turn) -> None:
        pass

    def save_round(self, round_id: str, summary: Dict[str, object]) -> None:
        pass


class MemoryRecorder:
    def __init__(self) -> None:
        self.turns: List[Turn] = []
        self.rounds: List[Tuple[str, Dict[str, object]]] = []

    def save_turn(self, turn: Turn) -> None:
        self.turns.append(turn)

    def save_round(self, round_id: str, summary: Dict[str, object]) -> None:
        self.rounds.append((round_id, summary))

    def turns_for(self, round_id: str) -> List[Turn]:
        return [turn for turn in self.turns if turn.round_id == round_id]


class JsonLinesRecorder:
    """Appends one JSON object per turn and per finished round to ``path``."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def save_turn(self, turn: Turn) -> None:
        self._append({"type": "turn", **turn_payload(turn)})

    def save_round(self, round_id: str, summary: Dict[str, object]) -> None:
        self._append({"type": "round", "round_id": round_id, **summary})
        LOGGER.info("Round %s saved to %s", round_id, self.path)

    def _append(self, record: Dict[str, Any]) -> None:
        line = json.dumps(record, sort_keys=True)
        with self._lock, self.path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    def load(self, record_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as handle:
            records = [json.loads(line) for line in handle if line.strip()]
        if record_type is None:
            return records
        return [record for record in records if record.get("type") == record_type]

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional

import websockets
from websockets.asyncio.server import ServerConnection, serve

from pokerengine.cards import Deck
from pokerengine.game import RoundController, RoundResult
from pokerengine.models import SEAT_LIMITS, Player, TableConfig
from pokerengine.records import NullRecorder, RoundRecorder
from pokerengine.variants import create_controller

from .remote import RemoteInput

LOGGER = logging.getLogger("poker_host")

# TableHost glues one round controller to WebSocket clients. The controller
# runs in a worker thread and blocks on RemoteInput; every socket write and
# every pending decision lives on the event loop.


@dataclass
class Seat:
    seat: int
    name: str
    name_key: str
    player: Player
    connected: bool = False


@dataclass
class ClientSession:
    seat: int
    name: str
    websocket: ServerConnection


@dataclass
class PendingDecision:
    seat: int
    kind: str
    future: asyncio.Future


class TableHost:
    def __init__(
        self,
        config: TableConfig,
        recorder: Optional[RoundRecorder] = None,
        seed: Optional[int] = None,
        round_delay: float = 1.0,
        max_rounds: Optional[int] = None,
    ) -> None:
        self.config = config
        self.variant = config.validate()
        self.table_id = "T-1"
        self.remote = RemoteInput(self)
        self.controller: RoundController = create_controller(
            config,
            player_input=self.remote,
            deck=Deck(seed),
            recorder=recorder or NullRecorder(),
        )
        self.seats: List[Optional[Seat]] = [None] * config.seats
        self.sessions: Dict[int, ClientSession] = {}
        self.pending: Optional[PendingDecision] = None
        self.lock = asyncio.Lock()
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.round_task: Optional[asyncio.Task] = None
        self.round_counter = 0
        self.round_delay = round_delay
        self.max_rounds = max_rounds
        self.closed = False

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        self.loop = asyncio.get_running_loop()
        async with serve(self._handle_connection, host, port):
            LOGGER.info("Table host (%s) listening on %s:%s", self.variant.value, host, port)
            await asyncio.Future()

    # Seat management -------------------------------------------------

    def assign_seat(self, name: str) -> Seat:
        display = name.strip()
        if not display:
            raise ValueError("NAME_REQUIRED")
        name_key = display.casefold()
        for seat in self.seats:
            if seat and seat.name_key == name_key:
                return seat
        for idx, seat in enumerate(self.seats):
            if seat is None:
                player = Player(self.config.starting_balance, player_id=f"seat-{idx}", name=display)
                seat = Seat(seat=idx, name=display, name_key=name_key, player=player)
                self.seats[idx] = seat
                return seat
        raise RuntimeError("Table is full")

    def seat_for(self, player: Player) -> Optional[int]:
        for seat in self.seats:
            if seat and seat.player.player_id == player.player_id:
                return seat.seat
        return None

    def ready_players(self) -> List[Player]:
        return [seat.player for seat in self.seats if seat and seat.connected and seat.player.balance > 0]

    def lobby_state(self) -> Dict[str, object]:
        return {
            "players": [
                {"seat": seat.seat, "name": seat.name, "connected": seat.connected, "balance": seat.player.balance}
                for seat in self.seats
                if seat is not None
            ]
        }

    # Connections -----------------------------------------------------

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        # First message must be "hello" so we know who we are talking to.
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, code="BAD_HELLO", msg="Expected hello")
            await websocket.close()
            return
        name_raw = hello.get("name")
        if not isinstance(name_raw, str) or not name_raw.strip():
            await self._send_error(websocket, code="BAD_SCHEMA", msg="name required")
            await websocket.close()
            return

        try:
            async with self.lock:
                seat = self.assign_seat(name_raw)
        except RuntimeError:
            await self._send_error(websocket, code="TABLE_FULL", msg="No seats available")
            await websocket.close()
            return

        previous = self.sessions.get(seat.seat)
        if previous:
            await previous.websocket.close(code=4000, reason="Replaced by new connection")

        session = ClientSession(seat=seat.seat, name=seat.name, websocket=websocket)
        self.sessions[seat.seat] = session
        seat.connected = True
        LOGGER.info("Seat %s claimed by %s (balance=%s)", seat.seat, seat.name, seat.player.balance)

        await self._send_json(websocket, "welcome", {
            "table_id": self.table_id,
            "seat": seat.seat,
            "player_id": seat.player.player_id,
            "config": {
                "variant": self.config.variant,
                "seats": self.config.seats,
                "starting_balance": self.config.starting_balance,
                "raise_limit": self.config.raise_limit,
                "minimum_bet": self.config.minimum_bet,
                "move_time_ms": self.config.move_time_ms,
            },
        })
        await self.broadcast("lobby", self.lobby_state())
        await self._maybe_start_round()

        try:
            async for raw in websocket:
                message = self._decode(raw)
                if message.get("type") == "decision":
                    await self._handle_decision(session, message)
                else:
                    await self._send_error(websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
        except websockets.ConnectionClosed:
            pass
        finally:
            if self.sessions.get(seat.seat) is session:
                self.sessions.pop(seat.seat, None)
                seat.connected = False
        LOGGER.info("Seat %s (%s) disconnected", seat.seat, seat.name)
        await self.broadcast("lobby", self.lobby_state())

    # Decisions -------------------------------------------------------

    async def request_decision(
        self, seat_idx: int, kind: str, payload: Dict[str, object]
    ) -> Optional[Dict[str, object]]:
        """Prompt ``seat_idx`` and wait for its decision; None on timeout or disconnect."""
        session = self.sessions.get(seat_idx)
        if session is None:
            LOGGER.info("Seat %s is disconnected; applying fallback for %s", seat_idx, kind)
            return None

        timeout = self.config.move_time_ms / 1000 if self.config.move_time_ms > 0 else None
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        async with self.lock:
            self.pending = PendingDecision(seat=seat_idx, kind=kind, future=future)

        await self._send_json(session.websocket, kind, {**payload, "time_ms": self.config.move_time_ms})
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            LOGGER.info("Seat %s timed out on %s", seat_idx, kind)
            return None
        finally:
            async with self.lock:
                if self.pending and self.pending.future is future:
                    self.pending = None

    async def _handle_decision(self, session: ClientSession, message: Dict[str, object]) -> None:
        async with self.lock:
            pending = self.pending
            if pending is None or pending.seat != session.seat:
                await self._send_error(session.websocket, code="OUT_OF_TURN", msg="Not your turn")
                return
            if message.get("kind", pending.kind) != pending.kind:
                await self._send_error(session.websocket, code="WRONG_PROMPT", msg=f"Expected {pending.kind}")
                return
            if not pending.future.done():
                pending.future.set_result(message)
        LOGGER.debug("Decision from seat %s: %s", session.seat, message)

    def run_threadsafe(self, coro) -> object:
        """Run ``coro`` on the host loop from the round worker thread and wait for it."""
        if self.loop is None:
            raise RuntimeError("Table host is not running")
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result()

    # Round lifecycle -------------------------------------------------

    async def _maybe_start_round(self) -> None:
        async with self.lock:
            if self.closed:
                return
            if self.round_task and not self.round_task.done():
                return
            if self.max_rounds is not None and self.round_counter >= self.max_rounds:
                return
            players = self.ready_players()
            low, high = SEAT_LIMITS[self.variant]
            if len(players) < low:
                return
            players = players[:high]
            self.round_counter += 1
            round_id = f"R-{datetime.now(timezone.utc).strftime('%Y%m%d')}-{self.round_counter:05d}"
            self.controller.round_id = round_id
            if self.loop is None:
                self.loop = asyncio.get_running_loop()
            self.round_task = asyncio.create_task(self._run_round(round_id, players))

    async def _run_round(self, round_id: str, players: List[Player]) -> Optional[RoundResult]:
        await self.broadcast("start_round", {
            "round_id": round_id,
            "variant": self.variant.value,
            # play_round moves the button one seat before dealing
            "dealer_seat": self.seat_for(players[(self.controller.dealer_position + 1) % len(players)]),
            "players": [{"seat": self.seat_for(player), "name": player.name, "balance": player.balance} for player in players],
        })
        try:
            result = await asyncio.to_thread(self.controller.play_round, players)
        except Exception:
            # An aborted round leaves cards and stakes unsettled; the table stops dealing.
            LOGGER.exception("Round %s aborted; closing table %s", round_id, self.table_id)
            self.closed = True
            await self.broadcast("error", {"code": "ROUND_ABORTED", "msg": f"Round {round_id} aborted"})
            return None

        results = [
            {"seat": self.seat_for(player), "payout": result.payouts[player.player_id], "balance": player.balance}
            for player in players
        ]
        await self.broadcast("end_round", {"round_id": round_id, **result.to_payload(), "results": results})
        LOGGER.info("Round %s finished; balances=%s", round_id, {p.name: p.balance for p in players})

        if self.round_delay:
            await asyncio.sleep(self.round_delay)
        self.round_task = None
        await self._maybe_start_round()
        return result

    # Messaging -------------------------------------------------------

    async def send_to(self, seat_idx: int, msg_type: str, payload: Dict[str, object]) -> None:
        session = self.sessions.get(seat_idx)
        if session:
            await self._send_json(session.websocket, msg_type, payload)

    async def broadcast(self, msg_type: str, payload: Dict[str, object]) -> None:
        targets = [session.websocket for session in self.sessions.values()]
        if not targets:
            return
        message = self._envelope(msg_type, payload)
        await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    async def _read_message(self, websocket: ServerConnection) -> Optional[Dict[str, object]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Dropping malformed message: %r", raw[:200])
            return {}
        return message if isinstance(message, dict) else {}

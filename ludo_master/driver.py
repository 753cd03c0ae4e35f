"""
Match driver: runs the deferred parts of a match on top of a TurnController.

Human seats act through `roll()` / `move()`. AI seats and rolls without a
legal move are continued by scheduled callbacks; those callbacks report what
they did through the `on_event` listener so a transport can broadcast it.
Only one continuation is pending at a time, and it is cancelled when the
match ends or the driver is torn down.
"""

from __future__ import annotations

import random
from typing import Any, Callable, Dict, Optional

from loguru import logger

from .config import Config, config
from .controller import TurnController
from .exceptions import LudoError
from .player import Player
from .scheduler import ScheduledTask, Scheduler
from .state import AwaitingMove, AwaitingRoll, NoMoves
from .strategies import BaseStrategy
from .strategy import StrategyFactory
from .types import RollResult, TurnResult

EventListener = Callable[[str, Dict[str, Any]], None]


class MatchDriver:
    def __init__(
        self,
        controller: TurnController,
        scheduler: Scheduler,
        settings: Optional[Config] = None,
        strategies: Optional[Dict[str, BaseStrategy]] = None,
        on_event: Optional[EventListener] = None,
        rng: Optional[random.Random] = None,
    ):
        self.controller = controller
        self.scheduler = scheduler
        self.settings = settings or config
        self.rng = rng or controller.rng
        # Explicit per-color overrides; other AI seats use their difficulty
        self.strategies: Dict[str, BaseStrategy] = dict(strategies or {})
        self.on_event = on_event
        self._pending: Optional[ScheduledTask] = None
        self._by_difficulty: Dict[str, BaseStrategy] = {}
        self._closed = False

    @property
    def state(self):
        return self.controller.state

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    # --- Entry points for human seats ---
    def start(self) -> None:
        self.controller.start()
        self.refresh()

    def roll(self, dice: Optional[int] = None) -> RollResult:
        result = self.controller.roll(dice)
        self.refresh()
        return result

    def move(self, token_id: str) -> TurnResult:
        result = self.controller.move(token_id)
        self.refresh()
        return result

    def cancel(self) -> None:
        """Tear down: drop the pending continuation and ignore later ones."""
        self._closed = True
        self._cancel_pending()

    def refresh(self) -> None:
        """Schedule whatever continuation the current phase needs, if any."""
        self._cancel_pending()
        if self._closed or self.controller.is_over:
            return

        phase = self.state.phase
        player = self.controller.current_player
        if isinstance(phase, NoMoves):
            self._schedule(self.settings.NO_MOVE_DELAY, self._resolve_no_moves)
        elif player.is_ai and isinstance(phase, AwaitingRoll):
            self._schedule(self._ai_delay(player), self._ai_roll)
        elif player.is_ai and isinstance(phase, AwaitingMove):
            self._schedule(self._ai_delay(player), self._ai_move)

    def strategy_for(self, player: Player) -> BaseStrategy:
        if player.id in self.strategies:
            return self.strategies[player.id]
        name = player.ai_difficulty.value if player.ai_difficulty else "medium"
        if name not in self._by_difficulty:
            self._by_difficulty[name] = StrategyFactory.create_strategy(
                name, rng=self.rng
            )
        return self._by_difficulty[name]

    # --- Continuations ---
    def _resolve_no_moves(self) -> None:
        phase = self.state.phase
        if not isinstance(phase, NoMoves):
            return
        reroll = phase.reroll
        if self.controller.resolve_no_moves():
            self._emit("turn-passed", {"reroll": reroll})
        self.refresh()

    def _ai_roll(self) -> None:
        player = self.controller.current_player
        if not player.is_ai or not isinstance(self.state.phase, AwaitingRoll):
            return
        try:
            result = self.controller.roll()
        except LudoError as exc:
            logger.warning(f"AI roll for {player.id} rejected: {exc}")
            return
        self._emit("dice-rolled", {"roll": result})
        self.refresh()

    def _ai_move(self) -> None:
        player = self.controller.current_player
        phase = self.state.phase
        if not player.is_ai or not isinstance(phase, AwaitingMove):
            return
        move = self.strategy_for(player).select_move(
            list(phase.moves), self.state.players, player
        )
        if move is None:
            return
        try:
            result = self.controller.move(move.token_id)
        except LudoError as exc:
            logger.warning(f"AI move for {player.id} rejected: {exc}")
            return
        self._emit("token-moved", {"turn": result})
        if result.game_over:
            self._emit("game-ended", {"winner": player.id})
        self.refresh()

    # --- Internals ---
    def _ai_delay(self, player: Player) -> float:
        difficulty = player.ai_difficulty.value if player.ai_difficulty else "medium"
        jitter = self.rng.uniform(0.0, self.settings.AI_DELAY_JITTER)
        return self.settings.ai_delay(difficulty) + jitter

    def _schedule(self, delay: float, callback: Callable[[], None]) -> None:
        def run() -> None:
            self._pending = None
            if self._closed or self.controller.is_over:
                return
            callback()

        self._pending = self.scheduler.call_later(delay, run)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _emit(self, kind: str, payload: Dict[str, Any]) -> None:
        if self.on_event is not None:
            self.on_event(kind, payload)

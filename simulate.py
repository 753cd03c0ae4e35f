import argparse
import random
import sys
from typing import Dict, List, Optional

from loguru import logger

from ludo_master.config import config
from ludo_master.controller import PlayerSpec, TurnController
from ludo_master.driver import MatchDriver
from ludo_master.player import AIDifficulty
from ludo_master.scheduler import ManualScheduler
from ludo_master.state import AwaitingMove, AwaitingRoll
from ludo_master.strategies import BaseStrategy
from ludo_master.strategy import StrategyFactory

HUMAN = "human"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play a local Ludo match")
    parser.add_argument(
        "--seats",
        type=str,
        default="hard,medium,easy,random",
        help="Comma separated seats in color order: easy, medium, hard, random or human",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for dice and AI picks")
    parser.add_argument(
        "--max-turns",
        type=int,
        default=config.MAX_TURNS,
        help="Stop the match after this many turns",
    )
    parser.add_argument("--verbose", action="store_true", help="Log AI reasoning")
    return parser.parse_args(argv)


def build_match(seats: List[str], rng: random.Random):
    """Turn seat names into a controller plus per-color strategy overrides."""
    specs: List[PlayerSpec] = []
    for seat in seats:
        if seat == HUMAN:
            specs.append(PlayerSpec(name="You"))
        elif seat in (d.value for d in AIDifficulty):
            specs.append(PlayerSpec(is_ai=True, ai_difficulty=AIDifficulty(seat)))
        elif seat in StrategyFactory.get_available_strategies():
            specs.append(PlayerSpec(is_ai=True))
        else:
            raise ValueError(
                f"Unknown seat '{seat}'. Available: "
                f"{StrategyFactory.get_available_strategies() + [HUMAN]}"
            )

    controller = TurnController.new_match(specs, rng=rng)
    overrides: Dict[str, BaseStrategy] = {}
    for seat, player in zip(seats, controller.state.players):
        if player.is_ai and seat not in (d.value for d in AIDifficulty):
            overrides[player.id] = StrategyFactory.create_strategy(seat, rng=rng)
    return controller, overrides


def describe_event(kind: str, payload: Dict) -> str:
    if kind == "dice-rolled":
        roll = payload["roll"]
        return f"{roll.player_color} rolled {roll.dice_value} ({len(roll.moves)} moves)"
    if kind == "token-moved":
        move = payload["turn"].move
        text = f"{move.player_color} moved {move.token_id}: {move.old_position} -> {move.new_position}"
        if move.captured:
            text += f", captured {', '.join(c.token_id for c in move.captured)}"
        if move.reached_finish:
            text += ", finished"
        if payload["turn"].gained_extra_turn:
            text += ", extra turn"
        return text
    if kind == "turn-passed":
        return "rolled a six with no move, rolling again" if payload["reroll"] else "no move, turn passes"
    if kind == "game-ended":
        return f"{payload['winner']} wins!"
    return kind


def ask_move(driver: MatchDriver) -> str:
    moves = driver.state.available_moves
    player = driver.controller.current_player
    for index, move in enumerate(moves):
        token = player.get_token(move.token_id)
        print(f"  [{index}] {move.token_id}: {token.position} -> {move.new_position}")
    while True:
        choice = input("Choose a move: ").strip()
        if choice.isdigit() and int(choice) < len(moves):
            return moves[int(choice)].token_id
        print(f"Enter a number between 0 and {len(moves) - 1}")


def play(driver: MatchDriver, scheduler: ManualScheduler, max_turns: int) -> Optional[str]:
    """Run the match to the end; returns the winner's color or None on the turn cap."""
    state = driver.state
    driver.start()
    while not driver.controller.is_over and state.turn_number < max_turns:
        player = driver.controller.current_player
        if not player.is_ai and isinstance(state.phase, AwaitingRoll):
            result = driver.roll()
            print(describe_event("dice-rolled", {"roll": result}))
            continue
        if not player.is_ai and isinstance(state.phase, AwaitingMove):
            turn = driver.move(ask_move(driver))
            print(describe_event("token-moved", {"turn": turn}))
            continue
        if not scheduler.run_next():
            break
    winner = state.winner
    return winner.value if winner else None


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    seats = [s.strip().lower() for s in args.seats.split(",") if s.strip()]
    rng = random.Random(args.seed)
    controller, overrides = build_match(seats, rng)
    scheduler = ManualScheduler()
    driver = MatchDriver(
        controller,
        scheduler,
        strategies=overrides,
        on_event=lambda kind, payload: print(describe_event(kind, payload)),
        rng=rng,
    )

    print("--- Ludo Master local match ---")
    for player in controller.state.players:
        kind = "human" if not player.is_ai else overrides.get(player.id, player.ai_difficulty.value)
        if isinstance(kind, BaseStrategy):
            kind = kind.name
        print(f"{player.name} ({player.id}): {kind}")

    winner = play(driver, scheduler, args.max_turns)
    if winner is None:
        print(f"No winner after {controller.state.turn_number} turns")
        return 1
    print(f"Winner: {winner} after {controller.state.turn_number} turns")
    return 0


if __name__ == "__main__":
    sys.exit(main())

import random
import unittest

from ludo_master.controller import PlayerSpec, TurnController
from ludo_master.exceptions import (
    AlreadyRolledError,
    GameNotStartedError,
    InvalidActionError,
    InvalidMoveError,
    MustRollFirstError,
)
from ludo_master.player import AIDifficulty, PlayerColor
from ludo_master.state import AwaitingMove, GameStatus


class TestGameCore(unittest.TestCase):
    def setUp(self):
        self.controller = TurnController.new_match(
            [PlayerSpec(name="Ann"), PlayerSpec(is_ai=True), PlayerSpec(), PlayerSpec()],
            rng=random.Random(11),
        )

    def test_initial_state(self):
        state = self.controller.state
        self.assertEqual(len(state.players), 4)
        self.assertEqual(state.status, GameStatus.SETUP)
        self.assertEqual([p.id for p in state.players], ["red", "green", "yellow", "blue"])
        self.assertEqual(state.players[0].name, "Ann")
        self.assertEqual(state.players[1].ai_difficulty, AIDifficulty.MEDIUM)
        for p in state.players:
            self.assertEqual(p.get_finished_tokens_count(), 0)

    def test_player_count_is_checked(self):
        with self.assertRaises(InvalidActionError):
            TurnController.new_match([PlayerSpec()])
        with self.assertRaises(InvalidActionError):
            TurnController.new_match([PlayerSpec()] * 5)

    def test_duplicate_colors_rejected(self):
        with self.assertRaises(InvalidActionError):
            TurnController.new_match(
                [PlayerSpec(color=PlayerColor.RED), PlayerSpec(color=PlayerColor.RED)]
            )

    def test_roll_before_start(self):
        with self.assertRaises(GameNotStartedError):
            self.controller.roll()

    def test_roll_dice_range(self):
        self.controller.start()
        for _ in range(50):
            result = self.controller.roll()
            self.assertTrue(1 <= result.dice_value <= 6)
            if result.moves:
                self.controller.move(result.moves[0].token_id)
            else:
                self.controller.resolve_no_moves()

    def test_injected_dice_out_of_range(self):
        self.controller.start()
        with self.assertRaises(InvalidActionError):
            self.controller.roll(7)

    def test_roll_twice_rejected(self):
        self.controller.start()
        self.controller.roll(6)
        with self.assertRaises(AlreadyRolledError):
            self.controller.roll(6)

    def test_move_before_roll_rejected(self):
        self.controller.start()
        with self.assertRaises(MustRollFirstError):
            self.controller.move("red_0")

    def test_execute_invalid_token(self):
        self.controller.start()
        self.controller.roll(6)
        before = self.controller.state.to_dict()
        with self.assertRaises(InvalidMoveError):
            self.controller.move("red_9")
        with self.assertRaises(InvalidMoveError):
            self.controller.move("green_0")
        self.assertEqual(self.controller.state.to_dict(), before)
        self.assertIsInstance(self.controller.state.phase, AwaitingMove)

    def test_snapshot_shape(self):
        self.controller.start()
        self.controller.roll(6)
        snapshot = self.controller.state.to_dict()
        self.assertEqual(snapshot["status"], "PLAYING")
        self.assertTrue(snapshot["hasRolled"])
        self.assertEqual(snapshot["diceValue"], 6)
        self.assertEqual(snapshot["availableMoves"][0], {"tokenId": "red_0", "newPosition": 1})
        self.assertIsNotNone(snapshot["turnStartTime"])

    def test_conservation(self):
        self.controller.start()
        rng = random.Random(5)
        for _ in range(200):
            if self.controller.is_over:
                break
            result = self.controller.roll()
            if result.moves:
                self.controller.move(rng.choice(result.moves).token_id)
            else:
                self.controller.resolve_no_moves()
            for player in self.controller.state.players:
                self.assertEqual(len(player.tokens), 4)
                for token in player.tokens:
                    if token.is_in_home():
                        self.assertEqual(token.position, -1)
                    if token.is_finished():
                        self.assertEqual(token.position, 999)


if __name__ == "__main__":
    unittest.main()

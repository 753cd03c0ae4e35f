import unittest

from ludo_master.controller import PlayerSpec, TurnController
from ludo_master.rules import legal_moves
from ludo_master.state import AwaitingRoll, NoMoves


class TestHomeColumnAndSixes(unittest.TestCase):
    def setUp(self):
        self.controller = TurnController.new_match([PlayerSpec(), PlayerSpec()])
        self.controller.start()
        self.red = self.controller.state.players[0]

    def test_exact_finish_required(self):
        token = self.red.tokens[0]
        token.place(105)
        self.assertEqual(legal_moves(self.red, 3), [])
        moves = legal_moves(self.red, 1)
        self.assertEqual(moves[0].new_position, 106)

    def test_overshooting_token_gets_no_move(self):
        self.red.tokens[0].place(105)
        self.red.tokens[1].place(20)
        moves = legal_moves(self.red, 3)
        self.assertEqual([m.token_id for m in moves], ["red_1"])

    def test_six_from_all_home_exits_and_keeps_turn(self):
        result = self.controller.roll(6)
        self.assertEqual(len(result.moves), 4)
        turn = self.controller.move("red_0")
        self.assertEqual(self.red.tokens[0].position, 1)
        self.assertTrue(turn.move.moved_out_of_home)
        self.assertTrue(turn.gained_extra_turn)
        self.assertIs(self.controller.current_player, self.red)

    def test_six_without_moves_rerolls(self):
        for token in self.red.tokens[:3]:
            token.finish()
        self.red.tokens[3].place(105)
        result = self.controller.roll(6)
        self.assertTrue(result.reroll)
        self.assertEqual(self.controller.state.phase, NoMoves(reroll=True))
        self.assertTrue(self.controller.resolve_no_moves())
        self.assertIsInstance(self.controller.state.phase, AwaitingRoll)
        self.assertIs(self.controller.current_player, self.red)

    def test_no_moves_without_six_passes(self):
        result = self.controller.roll(4)
        self.assertFalse(result.reroll)
        self.controller.resolve_no_moves()
        self.assertEqual(self.controller.current_player.id, "green")
        self.assertEqual(self.controller.state.turn_number, 1)

    def test_resolving_twice_is_harmless(self):
        self.controller.roll(2)
        self.assertTrue(self.controller.resolve_no_moves())
        self.assertFalse(self.controller.resolve_no_moves())
        self.assertEqual(self.controller.current_player.id, "green")


if __name__ == "__main__":
    unittest.main()

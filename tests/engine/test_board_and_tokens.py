import unittest

from ludo_master.board import advance, reach_counts, ring_occupancy
from ludo_master.constants import BoardConstants, GameConstants
from ludo_master.player import Player, PlayerColor
from ludo_master.rules import legal_moves
from ludo_master.token import Token, TokenState


class TestBoardAndTokens(unittest.TestCase):
    def setUp(self):
        self.players = [Player(color) for color in PlayerColor]

    def test_initial_tokens_home(self):
        for player in self.players:
            self.assertEqual(len(player.tokens), GameConstants.TOKENS_PER_PLAYER)
            for token in player.tokens:
                self.assertTrue(token.is_in_home())
                self.assertEqual(token.position, -1)

    def test_token_ids_follow_color(self):
        red = self.players[0]
        self.assertEqual([t.token_id for t in red.tokens], ["red_0", "red_1", "red_2", "red_3"])

    def test_state_forces_position(self):
        token = Token("red_0", "red", state=TokenState.FINISHED, position=12)
        self.assertEqual(token.position, GameConstants.FINISHED_POSITION)

    def test_enter_board_on_six(self):
        red = self.players[0]
        moves = legal_moves(red, 6)
        self.assertEqual(len(moves), 4)
        self.assertTrue(all(m.new_position == 1 for m in moves))

    def test_no_enter_without_six(self):
        for dice in range(1, 6):
            self.assertEqual(legal_moves(self.players[0], dice), [])

    def test_start_squares_are_safe(self):
        for start in BoardConstants.START_POSITIONS.values():
            self.assertTrue(BoardConstants.is_safe_position(start))


class TestAdvance(unittest.TestCase):
    def test_ring_wraps(self):
        self.assertEqual(advance("yellow", 50, 4), 2)

    def test_enters_own_lane_after_entry_square(self):
        self.assertEqual(advance("red", 50, 3), 102)
        self.assertEqual(advance("green", 12, 1), 201)

    def test_other_colors_pass_the_entry(self):
        self.assertEqual(advance("green", 50, 3), 1)

    def test_exact_finish(self):
        self.assertEqual(advance("blue", 38, 6), 406)

    def test_overshoot_is_rejected(self):
        self.assertIsNone(advance("red", 105, 3))
        self.assertIsNone(advance("red", 106, 1))

    def test_finish_lane_owner(self):
        self.assertEqual(BoardConstants.finish_lane_owner(101), "red")
        self.assertEqual(BoardConstants.finish_lane_owner(406), "blue")
        self.assertIsNone(BoardConstants.finish_lane_owner(100))
        self.assertIsNone(BoardConstants.finish_lane_owner(51))
        self.assertTrue(BoardConstants.is_finish_lane_position(303))
        self.assertFalse(BoardConstants.is_finish_lane_position(999))


class TestOccupancyMaps(unittest.TestCase):
    def setUp(self):
        self.red = Player(PlayerColor.RED)
        self.green = Player(PlayerColor.GREEN)
        self.green.tokens[0].place(10)
        self.green.tokens[1].place(10)
        self.red.tokens[0].place(8)

    def test_ring_occupancy_excludes_color(self):
        counts = ring_occupancy([self.red, self.green], exclude_color="red")
        self.assertEqual(counts.shape, (52,))
        self.assertEqual(counts[10], 2)
        self.assertEqual(counts[8], 0)

    def test_reach_ignores_lane_landings(self):
        reach = reach_counts([self.red, self.green], exclude_color="red")
        # green at 10 reaches 11 and 12, then walks into its lane
        self.assertEqual(reach[11], 2)
        self.assertEqual(reach[12], 2)
        self.assertEqual(int(reach.sum()), 4)


if __name__ == "__main__":
    unittest.main()

import random
import unittest

from ludo_master.config import Config
from ludo_master.exceptions import (
    CannotStartError,
    GameInProgressError,
    InvalidMoveError,
    MustRollFirstError,
    NotInRoomError,
    NotYourTurnError,
    RoomError,
)
from ludo_master.scheduler import ManualScheduler
from ludo_server.config import ServerConfig
from ludo_server.coordinator import SessionCoordinator
from ludo_server.rooms import RoomStatus


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class CoordinatorTestCase(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.scheduler = ManualScheduler()
        self.deferred = []
        self.coordinator = SessionCoordinator(
            self.scheduler,
            settings=ServerConfig(),
            engine_settings=Config(),
            clock=self.clock,
            rng_factory=lambda: random.Random(3),
            sink=self.deferred.extend,
        )

    def create(self, conn="c1", name="Ann", **kwargs):
        out = self.coordinator.create_room(conn, name, **kwargs)
        return out[0].data["roomId"], out[0].data["player"]

    def join(self, room_id, conn="c2", name="Bob"):
        out = self.coordinator.join_room(conn, room_id, name)
        return out[0].data["player"]

    def started_room(self):
        room_id, ann = self.create()
        bob = self.join(room_id)
        self.coordinator.set_ready("c1", True)
        self.coordinator.set_ready("c2", True)
        self.coordinator.start_game("c1")
        return room_id, ann, bob

    def state(self, room_id):
        return self.coordinator.games[room_id].state


class TestRoomFlow(CoordinatorTestCase):
    def test_create_room(self):
        out = self.coordinator.create_room("c1", "Ann", 4, False)
        self.assertEqual(len(out), 1)
        envelope = out[0]
        self.assertEqual(envelope.event, "room-created")
        self.assertEqual(envelope.connection_id, "c1")
        self.assertEqual(len(envelope.data["roomId"]), 8)
        self.assertTrue(envelope.data["roomId"].isupper() or envelope.data["roomId"].isdigit())
        self.assertEqual(envelope.data["player"]["color"], "red")
        self.assertTrue(envelope.data["player"]["isHost"])

    def test_join_notifies_others(self):
        room_id, _ = self.create()
        out = self.coordinator.join_room("c2", room_id, "Bob")
        self.assertEqual([e.event for e in out], ["room-joined", "player-joined"])
        self.assertEqual(out[1].exclude, "c2")
        self.assertEqual(self.coordinator.recipients(out[1]), ["c1"])
        self.assertEqual(out[0].data["player"]["color"], "green")

    def test_duplicate_name_is_reported_to_requester_only(self):
        room_id, _ = self.create()
        out = self.coordinator.handle("c2", {"event": "join-room", "data": {"roomId": room_id, "name": "Ann"}})
        self.assertEqual(len(out), 1)
        self.assertEqual(out[0].event, "error")
        self.assertEqual(out[0].connection_id, "c2")
        self.assertEqual(out[0].data["message"], "Player name already taken")
        self.assertEqual(len(self.coordinator.rooms.get_room(room_id).players), 1)

    def test_start_requires_everyone_ready(self):
        room_id, _ = self.create()
        self.join(room_id)
        self.coordinator.set_ready("c1", True)
        with self.assertRaises(CannotStartError):
            self.coordinator.start_game("c1")
        self.assertNotIn(room_id, self.coordinator.games)

    def test_start_game(self):
        room_id, _ = self.create()
        self.join(room_id)
        self.coordinator.set_ready("c1", True)
        out = self.coordinator.set_ready("c2", True)
        self.assertEqual(out[0].event, "player-ready-changed")
        self.assertTrue(self.coordinator.can_start(room_id))
        out = self.coordinator.start_game("c2")
        self.assertEqual(out[0].event, "game-started")
        self.assertEqual(out[0].data["gameState"]["status"], "PLAYING")
        self.assertEqual(self.coordinator.rooms.get_room(room_id).status, RoomStatus.PLAYING)
        with self.assertRaises(GameInProgressError):
            self.coordinator.join_room("c3", room_id, "Cid")

    def test_leave_before_start_migrates_host(self):
        room_id, _ = self.create()
        bob = self.join(room_id)
        out = self.coordinator.leave_room("c1")
        self.assertEqual([e.event for e in out], ["room-left", "player-left"])
        room = self.coordinator.rooms.get_room(room_id)
        self.assertTrue(room.get_player(bob["id"]).is_host)
        with self.assertRaises(NotInRoomError):
            self.coordinator.leave_room("c1")

    def test_last_member_leaving_tears_down_room(self):
        room_id, _ = self.create()
        self.coordinator.leave_room("c1")
        self.assertNotIn(room_id, self.coordinator.rooms.rooms)

    def test_chat(self):
        self.create()
        out = self.coordinator.send_message("c1", "  hello  ")
        self.assertEqual(out[0].event, "message-received")
        self.assertEqual(out[0].data["text"], "hello")
        self.assertEqual(out[0].data["playerName"], "Ann")
        error = self.coordinator.handle("c1", {"event": "send-message", "data": {"text": "   "}})
        self.assertEqual(error[0].event, "error")
        error = self.coordinator.handle("c1", {"event": "send-message", "data": {"text": "x" * 501}})
        self.assertIn("too long", error[0].data["message"])

    def test_malformed_and_unknown_events(self):
        for message in ("nope", {"data": {}}, {"event": "fly"}, {"event": "join-room", "data": {}}):
            out = self.coordinator.handle("c9", message)
            self.assertEqual(len(out), 1)
            self.assertEqual(out[0].event, "error")
            self.assertEqual(out[0].connection_id, "c9")

    def test_health_and_info(self):
        room_id, _ = self.create()
        health = self.coordinator.health()
        self.assertEqual(health["activeRooms"], 1)
        self.assertEqual(health["activeGames"], 0)
        self.assertEqual(health["connectedClients"], 1)
        self.assertEqual(self.coordinator.room_info(room_id)["playerCount"], 1)


class TestTurnOwnership(CoordinatorTestCase):
    def test_out_of_turn_roll_rejected(self):
        room_id, _, _ = self.started_room()
        before = self.state(room_id).to_dict()
        with self.assertRaises(NotYourTurnError):
            self.coordinator.roll_dice("c2")
        out = self.coordinator.handle("c2", {"event": "roll-dice", "data": {}})
        self.assertEqual(out[0].data["message"], "Not your turn")
        self.assertEqual(self.state(room_id).to_dict(), before)

    def test_roll_and_move(self):
        room_id, _, _ = self.started_room()
        out = self.coordinator.roll_dice("c1", dice=6)
        data = out[0].data
        self.assertEqual(out[0].event, "dice-rolled")
        self.assertEqual(data["diceValue"], 6)
        self.assertEqual(len(data["availableMoves"]), 4)
        self.assertEqual(data["currentPlayer"], "red")
        out = self.coordinator.move_token("c1", "red_0")
        self.assertEqual(out[0].event, "token-moved")
        self.assertTrue(out[0].data["gainedExtraTurn"])
        self.assertEqual(out[0].data["move"]["to"], 1)
        self.assertEqual(self.state(room_id).current_player.id, "red")

    def test_move_before_roll_and_bad_token(self):
        room_id, _, _ = self.started_room()
        with self.assertRaises(MustRollFirstError):
            self.coordinator.move_token("c1", "red_0")
        self.coordinator.roll_dice("c1", dice=6)
        before = self.state(room_id).to_dict()
        with self.assertRaises(InvalidMoveError):
            self.coordinator.move_token("c1", "green_0")
        self.assertEqual(self.state(room_id).to_dict(), before)

    def test_no_moves_passes_after_pause(self):
        room_id, _, _ = self.started_room()
        out = self.coordinator.roll_dice("c1", dice=3)
        self.assertEqual(out[0].data["availableMoves"], [])
        self.assertEqual(self.deferred, [])
        self.scheduler.advance(1.5)
        self.assertEqual([e.event for e in self.deferred], ["turn-passed"])
        self.assertFalse(self.deferred[0].data["reroll"])
        self.assertEqual(self.state(room_id).current_player.id, "green")
        self.coordinator.roll_dice("c2", dice=2)

    def test_winning_move_ends_game(self):
        room_id, _, _ = self.started_room()
        red = self.state(room_id).players[0]
        for token in red.tokens[:3]:
            token.finish()
        red.tokens[3].place(104)
        self.coordinator.roll_dice("c1", dice=2)
        out = self.coordinator.move_token("c1", "red_3")
        self.assertEqual([e.event for e in out], ["token-moved", "game-ended"])
        self.assertEqual(out[1].data["winner"], "red")
        self.assertEqual(self.coordinator.rooms.get_room(room_id).status, RoomStatus.FINISHED)
        out = self.coordinator.handle("c2", {"event": "roll-dice", "data": {}})
        self.assertEqual(out[0].data["message"], "Game is over")

    def test_ready_after_finish_is_rejected(self):
        room_id, _, _ = self.started_room()
        red = self.state(room_id).players[0]
        for token in red.tokens[:3]:
            token.finish()
        red.tokens[3].place(104)
        self.coordinator.roll_dice("c1", dice=2)
        self.coordinator.move_token("c1", "red_3")
        with self.assertRaises(RoomError) as ctx:
            self.coordinator.set_ready("c2", False)
        self.assertEqual(str(ctx.exception), "Game has already finished")
        out = self.coordinator.handle("c2", {"event": "player-ready", "data": {"ready": False}})
        self.assertEqual(out[0].data["message"], "Game has already finished")

    def test_room_stats_include_match(self):
        room_id, _, _ = self.started_room()
        self.coordinator.roll_dice("c1", dice=6)
        stats = self.coordinator.room_stats(room_id)
        self.assertEqual(stats["connectedPlayers"], 2)
        self.assertFalse(stats["canStart"])
        self.assertEqual(stats["game"]["currentPlayer"], "red")
        self.assertTrue(stats["game"]["hasRolled"])
        self.assertEqual(stats["game"]["playerStats"][0]["tokensHome"], 4)

    def test_leaving_mid_game_hands_seat_to_ai(self):
        room_id, _, _ = self.started_room()
        out = self.coordinator.leave_room("c1")
        player_left = out[1]
        self.assertEqual(player_left.event, "player-left")
        red = player_left.data["gameState"]["players"][0]
        self.assertTrue(red["isAI"])
        self.assertEqual(red["aiDifficulty"], "medium")
        self.scheduler.run_next()
        self.assertEqual(self.deferred[0].event, "dice-rolled")
        self.assertEqual(self.deferred[0].data["currentPlayer"], "red")


class TestConnections(CoordinatorTestCase):
    def test_disconnect_and_reconnect(self):
        room_id, ann, _ = self.started_room()
        out = self.coordinator.disconnect("c1")
        self.assertEqual(out[0].event, "player-disconnected")
        self.assertEqual(self.coordinator.recipients(out[0]), ["c2"])
        with self.assertRaises(NotInRoomError):
            self.coordinator.roll_dice("c1")

        out = self.coordinator.reconnect("c7", room_id, ann["id"])
        self.assertEqual([e.event for e in out], ["reconnected", "player-reconnected"])
        self.assertEqual(out[0].data["gameState"]["status"], "PLAYING")
        self.assertEqual(self.coordinator.recipients(out[1]), ["c2"])
        self.coordinator.roll_dice("c7", dice=6)

    def test_unknown_connection_disconnect_is_noop(self):
        self.assertEqual(self.coordinator.disconnect("ghost"), [])

    def test_room_removed_after_grace_window(self):
        room_id, _, _ = self.started_room()
        self.coordinator.disconnect("c1")
        self.coordinator.disconnect("c2")
        self.scheduler.advance(299)
        self.assertIn(room_id, self.coordinator.rooms.rooms)
        self.scheduler.advance(2)
        self.assertNotIn(room_id, self.coordinator.rooms.rooms)
        self.assertNotIn(room_id, self.coordinator.games)

    def test_reconnect_within_grace_keeps_room(self):
        room_id, ann, _ = self.started_room()
        self.coordinator.disconnect("c1")
        self.coordinator.disconnect("c2")
        self.scheduler.advance(100)
        self.coordinator.reconnect("c3", room_id, ann["id"])
        self.scheduler.advance(400)
        self.assertIn(room_id, self.coordinator.rooms.rooms)

    def test_leaving_last_connected_member_arms_grace(self):
        room_id, _ = self.create()
        self.join(room_id)
        self.coordinator.disconnect("c2")
        self.coordinator.leave_room("c1")
        self.scheduler.advance(299)
        self.assertIn(room_id, self.coordinator.rooms.rooms)
        self.scheduler.advance(2)
        self.assertNotIn(room_id, self.coordinator.rooms.rooms)
        self.assertEqual(self.coordinator.bindings, {})

    def test_ai_seat_does_not_keep_abandoned_match_alive(self):
        room_id, _, _ = self.started_room()
        self.coordinator.disconnect("c2")
        self.coordinator.leave_room("c1")
        self.assertTrue(self.state(room_id).players[0].is_ai)
        self.scheduler.advance(301)
        self.assertTrue(self.deferred)
        self.assertEqual(self.deferred[0].event, "dice-rolled")
        self.assertNotIn(room_id, self.coordinator.rooms.rooms)
        self.assertNotIn(room_id, self.coordinator.games)
        self.assertEqual(self.scheduler.run_until_idle(), 0)

    def test_sweep_inactive_rooms(self):
        room_id, _ = self.create()
        self.clock.now += 1800
        self.assertEqual(self.coordinator.sweep_inactive(), 0)
        self.clock.now += 1801
        self.assertEqual(self.coordinator.sweep_inactive(), 1)
        self.assertNotIn(room_id, self.coordinator.rooms.rooms)
        self.assertEqual(self.coordinator.bindings, {})

    def test_shutdown_cancels_matches(self):
        self.started_room()
        self.coordinator.roll_dice("c1", dice=3)
        self.coordinator.shutdown()
        self.assertEqual(self.scheduler.run_until_idle(), 0)
        self.assertEqual(self.coordinator.health()["activeRooms"], 0)


if __name__ == "__main__":
    unittest.main()

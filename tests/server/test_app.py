import unittest

from fastapi.testclient import TestClient

from ludo_server.app import create_app


class TestServerApp(unittest.TestCase):
    def setUp(self):
        self.app = create_app()
        self.client = TestClient(self.app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def create_room(self, ws, name="Ann"):
        ws.send_json({"event": "create-room", "data": {"name": name, "maxPlayers": 2}})
        reply = ws.receive_json()
        self.assertEqual(reply["event"], "room-created")
        return reply["data"]

    def test_root_banner(self):
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        for key in ("status", "timestamp", "activeRooms", "activeGames", "connectedClients"):
            self.assertIn(key, body)
        self.assertEqual(body["activeRooms"], 0)

    def test_room_info_404_for_unknown_room(self):
        resp = self.client.get("/rooms/DOESNOTEXIST")
        self.assertEqual(resp.status_code, 404)

    def test_create_room_over_websocket(self):
        with self.client.websocket_connect("/ws") as ws:
            data = self.create_room(ws)
            self.assertEqual(data["room"]["maxPlayers"], 2)
            info = self.client.get(f"/rooms/{data['roomId']}").json()
            self.assertEqual(info["playerCount"], 1)
            self.assertEqual(info["status"], "waiting")
            self.assertEqual(self.client.get("/health").json()["connectedClients"], 1)
            stats = self.client.get(f"/rooms/{data['roomId']}/stats").json()
            self.assertEqual(stats["readyPlayers"], 0)
            self.assertIsNone(stats["game"])

    def test_join_is_broadcast(self):
        with self.client.websocket_connect("/ws") as host, self.client.websocket_connect("/ws") as guest:
            room_id = self.create_room(host)["roomId"]
            guest.send_json({"event": "join-room", "data": {"roomId": room_id, "name": "Bob"}})
            joined = guest.receive_json()
            self.assertEqual(joined["event"], "room-joined")
            self.assertEqual(joined["data"]["player"]["color"], "green")
            notice = host.receive_json()
            self.assertEqual(notice["event"], "player-joined")

    def test_start_and_roll_out_of_turn(self):
        with self.client.websocket_connect("/ws") as host, self.client.websocket_connect("/ws") as guest:
            room_id = self.create_room(host)["roomId"]
            guest.send_json({"event": "join-room", "data": {"roomId": room_id, "name": "Bob"}})
            guest.receive_json()
            host.receive_json()
            for ws in (host, guest):
                ws.send_json({"event": "player-ready", "data": {"ready": True}})
                host.receive_json()
                guest.receive_json()
            guest.send_json({"event": "start-game", "data": {}})
            self.assertEqual(host.receive_json()["event"], "game-started")
            self.assertEqual(guest.receive_json()["event"], "game-started")

            guest.send_json({"event": "roll-dice", "data": {}})
            error = guest.receive_json()
            self.assertEqual(error, {"event": "error", "data": {"message": "Not your turn"}})

            host.send_json({"event": "roll-dice", "data": {}})
            rolled = host.receive_json()
            self.assertEqual(rolled["event"], "dice-rolled")
            self.assertEqual(guest.receive_json()["data"]["diceValue"], rolled["data"]["diceValue"])

    def test_malformed_frames_get_errors(self):
        with self.client.websocket_connect("/ws") as ws:
            ws.send_text("{not json")
            self.assertEqual(ws.receive_json()["event"], "error")
            ws.send_json({"event": "teleport", "data": {}})
            reply = ws.receive_json()
            self.assertEqual(reply["event"], "error")
            self.assertIn("Unknown event", reply["data"]["message"])


if __name__ == "__main__":
    unittest.main()

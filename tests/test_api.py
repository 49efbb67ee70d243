import unittest
from uuid import UUID, uuid4

from support import make_engine, make_player
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.auth import routes as auth_routes
from app.db_models import Role
from app.inventory.service import InventoryService
from app.main import app
from app.utils.db import get_session

API = "/api/v1"


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine()

        def override_session():
            with Session(self.engine) as session:
                yield session

        app.dependency_overrides[get_session] = override_session
        auth_routes._login_attempts.clear()
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def register(self, email="coach@example.com", password="super-secret"):
        resp = self.client.post(
            f"{API}/auth/sign-up",
            json={"email": email, "username": email.split("@")[0], "password": password},
        )
        self.assertEqual(resp.status_code, 201, resp.text)
        user_id = resp.json()["data"]["user_id"]

        resp = self.client.post(f"{API}/auth/login", json={"email": email, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        token = resp.json()["data"]["access_token"]
        return user_id, {"Authorization": f"Bearer {token}"}

    def grant(self, user_id, role):
        with Session(self.engine) as session:
            player = make_player(session, role)
            InventoryService(session).add_player(UUID(user_id), player.id)
            return str(player.id)

    def create_squad(self, headers, name="Main", formation="4-3-3", is_active=True):
        return self.client.post(
            f"{API}/squads",
            json={"name": name, "formation": formation, "is_active": is_active},
            headers=headers,
        )


class TestHealthAndAuth(ApiTestCase):
    def test_healthz(self):
        resp = self.client.get("/healthz")
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_me(self):
        _user_id, headers = self.register()
        resp = self.client.get(f"{API}/auth/me", headers=headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["email"], "coach@example.com")

    def test_login_returns_bearer_token(self):
        user_id, _headers = self.register()
        resp = self.client.post(
            f"{API}/auth/login", json={"email": "coach@example.com", "password": "super-secret"}
        )
        data = resp.json()["data"]
        self.assertEqual(data["token_type"], "bearer")
        self.assertEqual(data["user_id"], user_id)
        self.assertTrue(data["access_token"])

    def test_duplicate_email(self):
        self.register()
        resp = self.client.post(
            f"{API}/auth/sign-up",
            json={"email": "coach@example.com", "username": "again", "password": "another-pass"},
        )
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "EMAIL_EXISTS")

    def test_wrong_password(self):
        self.register()
        resp = self.client.post(
            f"{API}/auth/login", json={"email": "coach@example.com", "password": "nope-nope"}
        )
        self.assertEqual(resp.status_code, 401)

    def test_short_password_rejected(self):
        resp = self.client.post(
            f"{API}/auth/sign-up",
            json={"email": "a@example.com", "username": "abc", "password": "short"},
        )
        self.assertEqual(resp.status_code, 422)

    def test_squads_require_auth(self):
        resp = self.client.post(f"{API}/squads", json={"name": "x", "formation": "4-3-3"})
        self.assertIn(resp.status_code, (401, 403))

    def test_garbage_token(self):
        resp = self.client.get(
            f"{API}/squads/{uuid4()}", headers={"Authorization": "Bearer not-a-jwt"}
        )
        self.assertEqual(resp.status_code, 401)


class TestSquadEndpoints(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.user_id, self.headers = self.register()

    def test_create_squad(self):
        resp = self.create_squad(self.headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        squad = resp.json()["data"]["squad"]
        self.assertEqual(squad["user_id"], self.user_id)
        self.assertEqual(len(squad["positions"]), 18)

    def test_create_duplicate_name_conflict(self):
        self.create_squad(self.headers)
        resp = self.create_squad(self.headers, formation="4-4-2")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "SQUAD_NAME_EXISTS")

    def test_create_unknown_formation_is_validation_error(self):
        resp = self.create_squad(self.headers, formation="3-4-3")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["error"], "INVALID_INPUT")

    def test_get_squad_with_and_without_stats(self):
        squad_id = self.create_squad(self.headers).json()["data"]["squad"]["id"]
        gk = self.grant(self.user_id, Role.GOALKEEPER)
        self.client.put(
            f"{API}/squads/{squad_id}/lineup",
            json={"positions": [{"position_slot": "GK_1", "player_id": gk}]},
            headers=self.headers,
        )

        plain = self.client.get(f"{API}/squads/{squad_id}", headers=self.headers).json()
        detailed = self.client.get(
            f"{API}/squads/{squad_id}", params={"include_stats": "true"}, headers=self.headers
        ).json()

        first_slot = plain["data"]["squad"]["positions"][0]
        self.assertEqual(first_slot["position_slot"], "DF_1")
        self.assertIsNone(first_slot["player"])
        gk_plain = next(p for p in plain["data"]["squad"]["positions"] if p["position_slot"] == "GK_1")
        gk_detailed = next(
            p for p in detailed["data"]["squad"]["positions"] if p["position_slot"] == "GK_1"
        )
        self.assertNotIn("pace", gk_plain["player"])
        self.assertIn("pace", gk_detailed["player"])

    def test_get_malformed_id(self):
        resp = self.client.get(f"{API}/squads/not-a-uuid", headers=self.headers)
        self.assertEqual(resp.status_code, 422)

    def test_get_missing_squad(self):
        resp = self.client.get(f"{API}/squads/{uuid4()}", headers=self.headers)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"], "SQUAD_NOT_FOUND")

    def test_other_user_gets_forbidden(self):
        squad_id = self.create_squad(self.headers).json()["data"]["squad"]["id"]
        _other_id, other_headers = self.register("rival@example.com")

        resp = self.client.get(f"{API}/squads/{squad_id}", headers=other_headers)
        self.assertEqual(resp.status_code, 403)

        resp = self.client.put(
            f"{API}/squads/{squad_id}/lineup",
            json={"positions": [{"position_slot": "GK_1", "player_id": None}]},
            headers=other_headers,
        )
        self.assertEqual(resp.status_code, 403)


class TestLineupEndpoint(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.user_id, self.headers = self.register()
        self.squad_id = self.create_squad(self.headers).json()["data"]["squad"]["id"]

    def put_lineup(self, positions):
        return self.client.put(
            f"{API}/squads/{self.squad_id}/lineup",
            json={"positions": positions},
            headers=self.headers,
        )

    def test_assign_and_read_back(self):
        gk = self.grant(self.user_id, Role.GOALKEEPER)
        resp = self.put_lineup([{"position_slot": "GK_1", "player_id": gk}])
        self.assertEqual(resp.status_code, 200, resp.text)
        squad = resp.json()["data"]["squad"]
        self.assertEqual(squad["filled_positions"], 1)

        fetched = self.client.get(f"{API}/squads/{self.squad_id}", headers=self.headers).json()
        slots = {p["position_slot"]: p["player_id"] for p in fetched["data"]["squad"]["positions"]}
        self.assertEqual(slots["GK_1"], gk)
        self.assertEqual(sum(1 for v in slots.values() if v is None), 17)

    def test_error_mapping(self):
        gk = self.grant(self.user_id, Role.GOALKEEPER)
        fw = self.grant(self.user_id, Role.FORWARD)
        with Session(self.engine) as session:
            stranger = str(make_player(session, Role.GOALKEEPER).id)

        cases = [
            ([{"position_slot": "GK_1", "player_id": fw}], 400, "POSITION_MISMATCH"),
            ([{"position_slot": "GK_1", "player_id": stranger}], 400, "PLAYER_NOT_IN_INVENTORY"),
            (
                [{"position_slot": "MF_1", "player_id": fw}, {"position_slot": "MF_2", "player_id": fw}],
                409,
                "DUPLICATE_ASSIGNMENT",
            ),
            ([{"position_slot": "DF_9", "player_id": gk}], 400, "SLOT_NOT_FOUND"),
        ]
        for positions, status_code, code in cases:
            with self.subTest(code=code):
                resp = self.put_lineup(positions)
                self.assertEqual(resp.status_code, status_code, resp.text)
                self.assertEqual(resp.json()["error"], code)

        fetched = self.client.get(f"{API}/squads/{self.squad_id}", headers=self.headers).json()
        self.assertEqual(fetched["data"]["squad"]["filled_positions"], 0)

    def test_empty_positions_rejected(self):
        resp = self.put_lineup([])
        self.assertEqual(resp.status_code, 422)

    def test_malformed_player_id_rejected(self):
        resp = self.put_lineup([{"position_slot": "GK_1", "player_id": "abc"}])
        self.assertEqual(resp.status_code, 422)


class TestPlayerEndpoints(ApiTestCase):
    def test_inventory_and_catalog(self):
        user_id, headers = self.register()
        gk = self.grant(user_id, Role.GOALKEEPER)
        self.grant(user_id, Role.FORWARD)

        resp = self.client.get(
            f"{API}/players/my-inventory", params={"position": "GK"}, headers=headers
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        self.assertEqual(body["meta"]["total"], 1)
        self.assertEqual(body["data"][0]["player"]["id"], gk)

        resp = self.client.get(f"{API}/players/{gk}")
        self.assertEqual(resp.json()["data"]["position"], "GK")

        resp = self.client.get(f"{API}/players", params={"position": "FW"})
        self.assertEqual(resp.json()["meta"]["total"], 1)

        resp = self.client.get(f"{API}/players/{uuid4()}")
        self.assertEqual(resp.status_code, 404)

    def test_inventory_bad_query(self):
        _user_id, headers = self.register()
        resp = self.client.get(
            f"{API}/players/my-inventory", params={"limit": 500}, headers=headers
        )
        self.assertEqual(resp.status_code, 422)


if __name__ == "__main__":
    unittest.main()

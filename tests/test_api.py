import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from tokengate.auth.middleware import UNAUTHORIZED_DETAIL, extract_bearer
from tokengate.core.settings import settings
from tokengate.main import create_app

from support import FakeClock, memory_engine


class APITestCase(unittest.TestCase):

    def setUp(self):
        self.engine = memory_engine()
        self.app = create_app(settings=settings, engine=self.engine)
        self.service = self.app.state.token_service
        self.clock = FakeClock()
        self.service.clock = self.clock
        self.client = TestClient(self.app)
        self.client.__enter__()  # runs the lifespan: tables + admin seed

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def login(self, username, password):
        resp = self.client.post("/auth/login", json={"username": username, "password": password})
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["access_token"]

    def login_admin(self):
        return self.login(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)

    def register_and_login(self, username="alice", password="alice-password-1"):
        resp = self.client.post("/auth/register", json={"username": username, "password": password})
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()["id"], self.login(username, password)

    def bearer(self, token):
        return {"Authorization": f"Bearer {token}"}

    def assertRejected(self, resp):
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json(), {"detail": UNAUTHORIZED_DETAIL})
        self.assertEqual(resp.headers.get("WWW-Authenticate"), "Bearer")


class TestRequestInterceptor(APITestCase):

    def test_public_path_without_header_passes_through(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})

    def test_garbage_bearer_on_protected_path_is_401(self):
        self.assertRejected(self.client.get("/auth/me", headers=self.bearer("garbage")))

    def test_garbage_bearer_on_public_path_is_401(self):
        self.assertRejected(self.client.get("/health", headers=self.bearer("garbage")))

    def test_empty_bearer_is_401(self):
        self.assertRejected(self.client.get("/health", headers={"Authorization": "Bearer "}))

    def test_other_schemes_are_ignored(self):
        resp = self.client.get("/health", headers={"Authorization": "Basic YWxpY2U6c2VjcmV0"})
        self.assertEqual(resp.status_code, 200)

    def test_protected_path_without_header_is_401(self):
        self.assertRejected(self.client.get("/auth/me"))

    def test_valid_token_attaches_principal(self):
        user_id, token = self.register_and_login()
        resp = self.client.get("/auth/me", headers=self.bearer(token))

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["id"], user_id)
        self.assertEqual(body["username"], "alice")
        self.assertEqual(body["roles"], ["USER"])
        self.assertNotIn("hashed_password", body)

    def test_revoked_and_expired_look_identical_to_garbage(self):
        _, revoked_token = self.register_and_login("bob", "bob-password-1")
        self.client.post("/auth/logout", headers=self.bearer(revoked_token))

        _, expired_token = self.register_and_login("carol", "carol-password-1")
        self.clock.advance(hours=25)

        garbage = self.client.get("/auth/me", headers=self.bearer("garbage"))
        revoked = self.client.get("/auth/me", headers=self.bearer(revoked_token))
        expired = self.client.get("/auth/me", headers=self.bearer(expired_token))

        for resp in (garbage, revoked, expired):
            self.assertRejected(resp)
        self.assertEqual(garbage.content, revoked.content)
        self.assertEqual(revoked.content, expired.content)

    def test_store_failure_is_a_server_error(self):
        client = TestClient(self.app, raise_server_exceptions=False)
        with patch.object(self.service.store, "find_by_token", side_effect=OperationalError("select", {}, Exception("down"))):
            _, token = self.register_and_login()
            resp = client.get("/auth/me", headers=self.bearer(token))

        self.assertEqual(resp.status_code, 500)

    def test_oversized_request_id_does_not_break_requests(self):
        resp = self.client.get("/health", headers={"X-Request-ID": "x" * 500})
        self.assertEqual(resp.status_code, 200)

    def test_extract_bearer(self):
        self.assertIsNone(extract_bearer(None))
        self.assertIsNone(extract_bearer(""))
        self.assertIsNone(extract_bearer("Basic abc"))
        self.assertEqual(extract_bearer("Bearer abc"), "abc")
        self.assertEqual(extract_bearer("bearer  abc "), "abc")
        self.assertEqual(extract_bearer("Bearer"), "")


class TestAuthRoutes(APITestCase):

    def test_login_returns_bearer_token(self):
        resp = self.client.post(
            "/auth/login",
            json={"username": settings.ADMIN_USERNAME, "password": settings.ADMIN_PASSWORD},
        )
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertTrue(body["access_token"])
        self.assertIn("expires_at", body)

    def test_login_with_wrong_password_is_401(self):
        resp = self.client.post(
            "/auth/login",
            json={"username": settings.ADMIN_USERNAME, "password": "wrong-password"},
        )
        self.assertEqual(resp.status_code, 401)

    def test_login_unknown_user_is_401(self):
        resp = self.client.post("/auth/login", json={"username": "nobody", "password": "whatever1"})
        self.assertEqual(resp.status_code, 401)

    def test_register_rejects_duplicate_username(self):
        self.register_and_login()
        resp = self.client.post("/auth/register", json={"username": "alice", "password": "another-pass-1"})
        self.assertEqual(resp.status_code, 400)

    def test_register_validates_input(self):
        short = self.client.post("/auth/register", json={"username": "dave", "password": "short"})
        bad_name = self.client.post("/auth/register", json={"username": "d a v e", "password": "long-enough-1"})
        bad_email = self.client.post(
            "/auth/register", json={"username": "dave", "password": "long-enough-1", "email": "not-an-email"}
        )
        self.assertEqual(short.status_code, 422)
        self.assertEqual(bad_name.status_code, 422)
        self.assertEqual(bad_email.status_code, 422)

    def test_logout_revokes_the_request_token(self):
        _, token = self.register_and_login()

        resp = self.client.post("/auth/logout", headers=self.bearer(token))
        self.assertEqual(resp.status_code, 200)

        self.assertRejected(self.client.get("/auth/me", headers=self.bearer(token)))
        self.assertTrue(self.service.store.find_by_token(token).revoked)

    def test_logout_requires_a_token(self):
        self.assertRejected(self.client.post("/auth/logout"))

    def test_new_login_after_logout_works(self):
        _, first = self.register_and_login()
        self.client.post("/auth/logout", headers=self.bearer(first))

        second = self.login("alice", "alice-password-1")
        self.assertNotEqual(first, second)
        self.assertEqual(self.client.get("/auth/me", headers=self.bearer(second)).status_code, 200)


class TestAdminRoutes(APITestCase):

    def test_regular_user_is_forbidden(self):
        _, token = self.register_and_login()
        resp = self.client.get("/admin/tokens/expired", headers=self.bearer(token))

        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json(), {"detail": "Access denied"})

    def test_anonymous_is_unauthorized(self):
        self.assertRejected(self.client.get("/admin/tokens/expired"))

    def test_expired_report(self):
        alice_id, _ = self.register_and_login()
        self.clock.advance(hours=25)
        admin_token = self.login_admin()

        resp = self.client.get("/admin/tokens/expired", headers=self.bearer(admin_token))
        self.assertEqual(resp.status_code, 200)
        report = resp.json()
        self.assertEqual([entry["user_id"] for entry in report], [alice_id])
        self.assertFalse(report[0]["revoked"])
        self.assertNotIn("access_token", report[0])

    def test_expired_report_as_of(self):
        self.register_and_login()
        admin_token = self.login_admin()

        resp = self.client.get(
            "/admin/tokens/expired",
            params={"as_of": "2099-01-01T00:00:00Z"},
            headers=self.bearer(admin_token),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()), 2)

    def test_admin_revokes_user_token(self):
        alice_id, alice_token = self.register_and_login()
        admin_token = self.login_admin()

        resp = self.client.post(f"/admin/users/{alice_id}/revoke", headers=self.bearer(admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["already_revoked"])
        self.assertRejected(self.client.get("/auth/me", headers=self.bearer(alice_token)))

    def test_admin_revoke_reports_already_revoked(self):
        alice_id, alice_token = self.register_and_login()
        self.client.post("/auth/logout", headers=self.bearer(alice_token))
        admin_token = self.login_admin()

        resp = self.client.post(f"/admin/users/{alice_id}/revoke", headers=self.bearer(admin_token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"message": "Token already revoked", "already_revoked": True})

    def test_admin_revoke_unknown_user_is_404(self):
        admin_token = self.login_admin()
        resp = self.client.post("/admin/users/9999/revoke", headers=self.bearer(admin_token))
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()

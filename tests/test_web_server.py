"""
Testes da API Flask de exclusão (test_client, sem abrir porta)
"""

import os
import tempfile
import unittest
from unittest import mock

from deletion_fixtures import make_db, seed_user, count_for

from core.orchestrator import DeletionOrchestrator
from core.session import SessionContext
from core.web_server import WebServer, MSG_GENERIC_FAILURE


class WebServerTests(unittest.TestCase):
    def setUp(self):
        self.db = make_db(self)
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.session = SessionContext(os.path.join(tmp.name, "session.json"))
        self.orchestrator = DeletionOrchestrator(self.db, session=self.session)
        self.addCleanup(self.orchestrator.shutdown)
        self.client = WebServer(self.orchestrator, self.session).app.test_client()
        self.user_id = seed_user(self.db)

    def login(self, user_id=None):
        self.session.create_login_session(user_id or self.user_id, "Maria", "maria@exemplo.com")

    def test_account_deletion_requires_login(self):
        resp = self.client.post("/api/account-deletion", json={"user_id": self.user_id})
        self.assertEqual(resp.status_code, 401)
        self.assertFalse(resp.get_json()["success"])
        self.assertEqual(count_for(self.db, self.user_id)["users"], 1)

    def test_account_deletion_of_another_user_is_forbidden(self):
        other = seed_user(self.db, name="Joana")
        self.login()
        resp = self.client.post("/api/account-deletion", json={"user_id": other})
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(count_for(self.db, other)["users"], 1)

    def test_account_deletion(self):
        self.login()
        resp = self.client.post("/api/account-deletion", json={"user_id": self.user_id, "reason": "mudança"})
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["success"])
        self.assertTrue(body["session_invalidated"])
        self.assertGreater(body["request_id"], 0)
        self.assertEqual(count_for(self.db, self.user_id)["users"], 0)
        self.assertFalse(self.session.is_logged_in())

    def test_missing_user_id(self):
        self.login()
        resp = self.client.post("/api/account-deletion", json={})
        self.assertEqual(resp.status_code, 400)

    def test_data_deletion(self):
        self.login()
        resp = self.client.post("/api/data-deletion",
                                json={"user_id": self.user_id, "data_types": ["orders", "payment"]})
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.get_json()["session_invalidated"])
        counts = count_for(self.db, self.user_id)
        self.assertEqual((counts["orders"], counts["payment_methods"], counts["addresses"]), (0, 0, 1))
        self.assertTrue(self.session.is_logged_in())

    def test_data_deletion_requires_selection(self):
        self.login()
        for data_types in (None, [], "orders"):
            resp = self.client.post("/api/data-deletion",
                                    json={"user_id": self.user_id, "data_types": data_types})
            self.assertEqual(resp.status_code, 400, data_types)
        self.assertEqual(self.db.count("deletion_requests"), 0)

    def test_failure_uses_generic_message(self):
        self.login()
        with mock.patch.object(self.orchestrator.engine, "execute_complete_deletion", return_value=False):
            resp = self.client.post("/api/account-deletion", json={"user_id": self.user_id})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()["message"], MSG_GENERIC_FAILURE)

    def test_list_and_pending_requests(self):
        self.login()
        self.orchestrator.ledger.log_partial_deletion_request(self.user_id, ["orders"])

        resp = self.client.get(f"/api/users/{self.user_id}/deletion-requests/pending")
        self.assertEqual(resp.get_json(), {"success": True, "pending": True})

        resp = self.client.get(f"/api/users/{self.user_id}/deletion-requests?status=pending")
        requests_ = resp.get_json()["requests"]
        self.assertEqual(len(requests_), 1)
        self.assertEqual(requests_[0]["data_types"], ["orders"])
        self.assertEqual(requests_[0]["status"], "pending")

    def test_list_with_invalid_status(self):
        self.login()
        resp = self.client.get(f"/api/users/{self.user_id}/deletion-requests?status=cancelled")
        self.assertEqual(resp.status_code, 400)

    def test_history_requires_login(self):
        self.orchestrator.ledger.log_complete_deletion_request(self.user_id, "motivo pessoal")
        for path in (f"/api/users/{self.user_id}/deletion-requests",
                     f"/api/users/{self.user_id}/deletion-requests/pending"):
            resp = self.client.get(path)
            self.assertEqual(resp.status_code, 401, path)
            self.assertNotIn("requests", resp.get_json())
            self.assertNotIn("pending", resp.get_json())

    def test_history_of_another_user_is_forbidden(self):
        other = seed_user(self.db, name="Joana")
        self.orchestrator.ledger.log_complete_deletion_request(other, "motivo pessoal")
        self.login()
        for path in (f"/api/users/{other}/deletion-requests",
                     f"/api/users/{other}/deletion-requests/pending"):
            resp = self.client.get(path)
            self.assertEqual(resp.status_code, 403, path)
            self.assertNotIn("requests", resp.get_json())


if __name__ == "__main__":
    unittest.main()

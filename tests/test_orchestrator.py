"""
Testes do orquestrador (worker serial, Future e callback de resultado)
"""

import os
import tempfile
import threading
import unittest
from unittest import mock

from deletion_fixtures import make_db, seed_user, count_for

from core.exceptions import LedgerWriteFailure
from core.ledger import DeletionLedger
from core.models import DeletionType, RequestStatus
from core.orchestrator import (
    DeletionOrchestrator, MSG_ACCOUNT_DELETED, MSG_ACCOUNT_FAILED, MSG_DATA_DELETED,
    MSG_DATA_FAILED, MSG_EMPTY_SELECTION, MSG_INVALID_SCOPE, MSG_REGISTER_FAILED, MSG_UNAVAILABLE
)
from core.session import SessionContext

TIMEOUT = 10


class OrchestratorTests(unittest.TestCase):
    def setUp(self):
        self.db = make_db(self)
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.session = SessionContext(os.path.join(tmp.name, "session.json"))
        self.orchestrator = DeletionOrchestrator(self.db, session=self.session)
        self.addCleanup(self.orchestrator.shutdown)

    def test_complete_deletion_end_to_end(self):
        u1 = seed_user(self.db, name="Maria", order_items=(3, 0))
        self.session.create_login_session(u1, "Maria", "maria@exemplo.com")

        outcome = self.orchestrator.request_complete_deletion(u1, "no longer needed").result(TIMEOUT)

        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.message, MSG_ACCOUNT_DELETED)
        self.assertEqual(outcome.deletion_type, DeletionType.COMPLETE)
        self.assertTrue(outcome.session_invalidated)
        self.assertFalse(self.session.is_logged_in())
        self.assertEqual(set(count_for(self.db, u1).values()), {0})
        self.assertEqual(self.db.count("order_items"), 0)
        req = self.orchestrator.ledger.get_request(outcome.request_id)
        self.assertEqual(req.status, RequestStatus.COMPLETED)
        self.assertEqual(req.reason, "no longer needed")

    def test_partial_deletion_end_to_end(self):
        u2 = seed_user(self.db, name="Joana")
        self.session.create_login_session(u2, "Joana", "joana@exemplo.com")

        outcome = self.orchestrator.request_partial_deletion(u2, ["orders", "payment"]).result(TIMEOUT)

        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.message, MSG_DATA_DELETED)
        self.assertFalse(outcome.session_invalidated)
        self.assertTrue(self.session.is_logged_in())
        counts = count_for(self.db, u2)
        self.assertEqual(counts["orders"], 0)
        self.assertEqual(counts["payment_methods"], 0)
        self.assertEqual(counts["addresses"], 1)
        self.assertEqual(counts["user_preferences"], 1)
        self.assertEqual(counts["users"], 1)
        req = self.orchestrator.ledger.get_request(outcome.request_id)
        self.assertEqual(req.data_types, ["orders", "payment"])
        self.assertEqual(req.status, RequestStatus.COMPLETED)

    def test_register_failure_never_invokes_engine(self):
        ledger = mock.Mock(spec=DeletionLedger)
        ledger.log_complete_deletion_request.side_effect = LedgerWriteFailure(1)
        engine = mock.Mock()
        orchestrator = DeletionOrchestrator(self.db, session=self.session, ledger=ledger, engine=engine)
        self.addCleanup(orchestrator.shutdown)

        outcome = orchestrator.request_complete_deletion(1).result(TIMEOUT)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, MSG_REGISTER_FAILED)
        engine.execute_complete_deletion.assert_not_called()

    def test_engine_failure_reports_failure_and_keeps_session(self):
        u1 = seed_user(self.db)
        self.session.create_login_session(u1, "Maria", "maria@exemplo.com")
        with mock.patch.object(self.orchestrator.engine, "_delete_orders",
                               side_effect=RuntimeError("falha simulada")):
            outcome = self.orchestrator.request_complete_deletion(u1).result(TIMEOUT)

        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, MSG_ACCOUNT_FAILED)
        self.assertTrue(self.session.is_logged_in())
        self.assertEqual(count_for(self.db, u1)["users"], 1)
        # A solicitação continua pendente para nova tentativa
        self.assertEqual(self.orchestrator.ledger.get_request(outcome.request_id).status,
                         RequestStatus.PENDING)

    def test_partial_engine_failure_message(self):
        u1 = seed_user(self.db)
        with mock.patch.object(self.orchestrator.engine, "execute_partial_deletion", return_value=False):
            outcome = self.orchestrator.request_partial_deletion(u1, ["orders"]).result(TIMEOUT)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, MSG_DATA_FAILED)

    def test_unexpected_fault_is_contained(self):
        with mock.patch.object(self.orchestrator.engine, "execute_complete_deletion",
                               side_effect=ValueError("boom")):
            outcome = self.orchestrator.request_complete_deletion(seed_user(self.db)).result(TIMEOUT)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, "Erro: boom")

    def test_callback_is_called_exactly_once(self):
        u1 = seed_user(self.db)
        calls = []
        done = threading.Event()

        def on_result(ok, message):
            calls.append((ok, message))
            done.set()

        future = self.orchestrator.request_partial_deletion(u1, ["payment"], on_result=on_result)
        future.result(TIMEOUT)
        self.assertTrue(done.wait(TIMEOUT))
        self.orchestrator.shutdown()
        self.assertEqual(calls, [(True, MSG_DATA_DELETED)])

    def test_callback_errors_do_not_escape(self):
        u1 = seed_user(self.db)

        def on_result(ok, message):
            raise RuntimeError("callback quebrado")

        outcome = self.orchestrator.request_partial_deletion(u1, ["payment"], on_result=on_result).result(TIMEOUT)
        self.assertTrue(outcome.ok)

    def test_requests_are_processed_in_submission_order(self):
        u1 = seed_user(self.db)
        order = []
        original = self.orchestrator.process_partial_deletion

        def record(user_id, data_types, reason=None):
            order.append(tuple(data_types))
            return original(user_id, data_types, reason)

        with mock.patch.object(self.orchestrator, "process_partial_deletion", side_effect=record):
            futures = [self.orchestrator.request_partial_deletion(u1, [tag])
                       for tag in ("orders", "payment", "addresses", "preferences")]
            for f in futures:
                f.result(TIMEOUT)
        self.assertEqual(order, [("orders",), ("payment",), ("addresses",), ("preferences",)])

    def test_initiate_dispatches_by_scope(self):
        u1 = seed_user(self.db)
        outcome = self.orchestrator.initiate(u1, ["payment"]).result(TIMEOUT)
        self.assertEqual(outcome.deletion_type, DeletionType.PARTIAL)
        self.assertTrue(outcome.ok)

        outcome = self.orchestrator.initiate(u1, "Complete").result(TIMEOUT)
        self.assertEqual(outcome.deletion_type, DeletionType.COMPLETE)
        self.assertTrue(outcome.ok)

    def test_initiate_rejects_empty_selection_and_invalid_scope(self):
        calls = []
        outcome = self.orchestrator.initiate(1, [], on_result=lambda ok, msg: calls.append(msg)).result(TIMEOUT)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, MSG_EMPTY_SELECTION)

        outcome = self.orchestrator.initiate(1, "everything").result(TIMEOUT)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, MSG_INVALID_SCOPE)
        self.assertEqual(calls, [MSG_EMPTY_SELECTION])
        self.assertEqual(self.db.count("deletion_requests"), 0)

    def test_retry_after_failure_is_allowed(self):
        u1 = seed_user(self.db)
        with mock.patch.object(self.orchestrator.engine, "_delete_user", side_effect=RuntimeError("x")):
            self.assertFalse(self.orchestrator.request_complete_deletion(u1).result(TIMEOUT).ok)
        self.assertTrue(self.orchestrator.request_complete_deletion(u1).result(TIMEOUT).ok)
        self.assertEqual(
            len(self.orchestrator.ledger.list_requests(u1, RequestStatus.COMPLETED)), 2
        )

    def test_remote_notification_does_not_change_outcome(self):
        notifier = mock.Mock()
        notifier.notify.return_value = (False, "Falha na conexão. Verifique sua internet e tente novamente.")
        orchestrator = DeletionOrchestrator(self.db, notifier=notifier)
        self.addCleanup(orchestrator.shutdown)
        u1 = seed_user(self.db)

        outcome = orchestrator.request_partial_deletion(u1, ["orders"], "motivo").result(TIMEOUT)

        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.remote_message, notifier.notify.return_value[1])
        notifier.notify.assert_called_once_with(u1, DeletionType.PARTIAL, ["orders"], "motivo")

    def test_submit_after_shutdown_reports_unavailable(self):
        self.orchestrator.shutdown()
        calls = []
        outcome = self.orchestrator.request_complete_deletion(
            1, on_result=lambda ok, msg: calls.append((ok, msg))
        ).result(TIMEOUT)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.message, MSG_UNAVAILABLE)
        self.assertEqual(calls, [(False, MSG_UNAVAILABLE)])


    def test_deleting_another_account_keeps_current_session(self):
        ana = seed_user(self.db, name="Ana")
        bia = seed_user(self.db, name="Bia")
        self.session.create_login_session(ana, "Ana", "ana@exemplo.com")

        outcome = self.orchestrator.request_complete_deletion(bia).result(TIMEOUT)

        self.assertTrue(outcome.ok)
        self.assertFalse(outcome.session_invalidated)
        self.assertTrue(self.session.is_logged_in())
        self.assertEqual(self.session.current_user().user_id, ana)
        self.assertEqual(count_for(self.db, bia)["users"], 0)

    def test_session_error_after_deletion_keeps_success(self):
        u1 = seed_user(self.db)
        self.session.create_login_session(u1, "Maria", "maria@exemplo.com")
        with mock.patch.object(self.session, "invalidate", side_effect=OSError("arquivo travado")):
            outcome = self.orchestrator.request_complete_deletion(u1).result(TIMEOUT)
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.message, MSG_ACCOUNT_DELETED)
        self.assertFalse(outcome.session_invalidated)
        self.assertEqual(count_for(self.db, u1)["users"], 0)

    def test_non_collection_scope_is_rejected(self):
        calls = []
        for scope in (None, 42):
            outcome = self.orchestrator.initiate(1, scope, on_result=lambda ok, msg: calls.append(ok)).result(TIMEOUT)
            self.assertFalse(outcome.ok)
            self.assertEqual(outcome.message, MSG_INVALID_SCOPE)
        outcome = self.orchestrator.request_partial_deletion(1, None).result(TIMEOUT)
        self.assertEqual(outcome.message, MSG_INVALID_SCOPE)
        self.assertEqual(calls, [False, False])
        self.assertEqual(self.db.count("deletion_requests"), 0)


if __name__ == "__main__":
    unittest.main()

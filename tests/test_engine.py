import unittest
import sys
import os
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from seatrush.engine import Engine
from seatrush.errors import ProvisioningError, TransportError
from seatrush.forensics import ForensicLogger
from seatrush.models import ResponseWrapper
from tests.stubs import StubClient, make_config


@patch('builtins.print')
class TestEngineScenarios(unittest.TestCase):
    """End-to-end runs against a stubbed golden-seat service."""

    def test_single_winner_holds_exclusivity(self, _print):
        client = StubClient(decide=lambda n: 201 if n == 1 else 400)
        engine = Engine(make_config(concurrency=10, duration=1.0, pacing_delay=0.05), client=client)

        report = engine.run()

        self.assertEqual(report.won, 1)
        self.assertEqual(report.rejected_expected, report.total - 1)
        self.assertEqual(report.rejected_unexpected, 0)
        self.assertTrue(report.exclusivity_held)
        self.assertEqual(report.total, len(client.attack_calls))
        self.assertGreaterEqual(report.total, 10)

    def test_double_grant_is_reported(self, _print):
        client = StubClient(decide=lambda n: 201 if n in (1, 2) else 400)
        engine = Engine(make_config(concurrency=10, duration=0.5, pacing_delay=0.05), client=client)

        report = engine.run()

        self.assertEqual(report.won, 2)
        self.assertFalse(report.exclusivity_held)
        self.assertEqual(len(report.winners), len(set(report.winners)))

    def test_missing_token_aborts_before_load(self, _print):
        client = StubClient(login_response=ResponseWrapper(200, json_data={"message": "ok"}))
        logger = ForensicLogger()
        engine = Engine(make_config(concurrency=10), client=client, forensic_log=logger)

        with self.assertRaises(ProvisioningError):
            engine.run()

        self.assertEqual(client.attack_calls, [])
        self.assertIsNone(engine.scheduler)
        self.assertEqual(len(logger.events_of("PROVISIONING_FAILED")), 1)
        self.assertEqual(logger.events_of("LOAD_START"), [])

    def test_fully_failed_run_still_reports(self, _print):
        client = StubClient(decide=lambda n: TransportError("ConnectionError: refused"))
        engine = Engine(make_config(concurrency=3, iterations=2, pacing_delay=0), client=client)

        report = engine.run()

        self.assertEqual(report.total, 6)
        self.assertEqual(report.rejected_unexpected, 6)
        self.assertEqual(report.won, 0)
        self.assertEqual(report.errors, ["ConnectionError: refused"])

    def test_shared_credential_on_every_request(self, _print):
        client = StubClient()
        engine = Engine(make_config(concurrency=4, iterations=3, pacing_delay=0), client=client)
        engine.run()

        self.assertEqual(len(client.login_calls), 1)
        auth = {c["headers"]["Authorization"] for c in client.attack_calls}
        self.assertEqual(auth, {"Bearer tok-abc123"})
        self.assertEqual(engine.credential.token, "tok-abc123")

    def test_seat_limit_from_config(self, _print):
        client = StubClient(decide=lambda n: 201 if n <= 3 else 400)
        report = Engine(make_config(concurrency=5, iterations=2, pacing_delay=0, seat_limit=3), client=client).run()
        self.assertEqual(report.won, 3)
        self.assertTrue(report.exclusivity_held)


if __name__ == '__main__':
    unittest.main()

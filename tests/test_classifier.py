import unittest
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from seatrush.classifier import classify
from seatrush.models import Outcome, ResponseWrapper, TRANSPORT_FAILURE_STATUS


class TestClassifier(unittest.TestCase):
    def test_created_wins(self):
        self.assertEqual(classify(ResponseWrapper(status_code=201)), Outcome.WON)

    def test_contention_rejections_are_expected(self):
        self.assertEqual(classify(ResponseWrapper(status_code=400)), Outcome.REJECTED_EXPECTED)
        self.assertEqual(classify(ResponseWrapper(status_code=500)), Outcome.REJECTED_EXPECTED)

    def test_transport_failure_is_unexpected(self):
        resp = ResponseWrapper.transport_failure("http://stub.local/x", "ConnectTimeout: boom")
        self.assertEqual(resp.status_code, TRANSPORT_FAILURE_STATUS)
        self.assertEqual(classify(resp), Outcome.REJECTED_UNEXPECTED)

    def test_total_over_status_range(self):
        for status in range(0, 1000):
            outcome = classify(status)
            if status == 201:
                self.assertEqual(outcome, Outcome.WON)
            elif status in (400, 500):
                self.assertEqual(outcome, Outcome.REJECTED_EXPECTED)
            else:
                self.assertEqual(outcome, Outcome.REJECTED_UNEXPECTED, f"status {status}")

    def test_server_statuses_outside_vocabulary(self):
        # 200 is not a claim, 401/404 are auth and missing-video errors on the target
        for status in (200, 202, 401, 403, 404, 409, 429, 502, 503):
            self.assertEqual(classify(ResponseWrapper(status_code=status)), Outcome.REJECTED_UNEXPECTED)

    def test_pure(self):
        resp = ResponseWrapper(status_code=201, text="created", json_data={"data": {}})
        first = classify(resp)
        second = classify(resp)
        self.assertEqual(first, second)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json_data, {"data": {}})


if __name__ == '__main__':
    unittest.main()

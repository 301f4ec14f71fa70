import unittest
import sys
import os
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from seatrush.errors import ProvisioningError, TransportError
from seatrush.models import Credential, ResponseWrapper
from seatrush.provisioner import provision, extract_path
from tests.stubs import StubClient


@patch('builtins.print')
class TestProvisioner(unittest.TestCase):
    def test_success_returns_credential(self, _print):
        client = StubClient()
        credential = provision(client, "testuser", "password123")

        self.assertIsInstance(credential, Credential)
        self.assertEqual(credential.token, "tok-abc123")
        self.assertEqual(credential.authorization(), "Bearer tok-abc123")
        self.assertEqual(len(client.login_calls), 1)
        call = client.login_calls[0]
        self.assertEqual(call["method"], "POST")
        self.assertEqual(call["target"], "api/v1/users/login")
        self.assertEqual(call["json"], {"username": "testuser", "password": "password123"})

    def test_missing_token_field(self, _print):
        client = StubClient(login_response=ResponseWrapper(200, json_data={"message": "ok", "data": {}}))
        with self.assertRaises(ProvisioningError) as ctx:
            provision(client, "testuser", "password123")
        self.assertIn("data.token", str(ctx.exception))

    def test_empty_token(self, _print):
        client = StubClient(login_response=ResponseWrapper(200, json_data={"data": {"token": "   "}}))
        with self.assertRaises(ProvisioningError):
            provision(client, "testuser", "password123")

    def test_non_string_token(self, _print):
        client = StubClient(login_response=ResponseWrapper(200, json_data={"data": {"token": 12345}}))
        with self.assertRaises(ProvisioningError) as ctx:
            provision(client, "testuser", "password123")
        self.assertIn("int", str(ctx.exception))

    def test_rejected_login_reports_server_error(self, _print):
        client = StubClient(login_response=ResponseWrapper(401, json_data={"error": "bad credentials"}))
        with self.assertRaises(ProvisioningError) as ctx:
            provision(client, "testuser", "wrong")
        self.assertIn("401", str(ctx.exception))
        self.assertIn("bad credentials", str(ctx.exception))

    def test_non_json_body(self, _print):
        client = StubClient(login_response=ResponseWrapper(200, text="<html>login</html>"))
        with self.assertRaises(ProvisioningError) as ctx:
            provision(client, "testuser", "password123")
        self.assertIn("not JSON", str(ctx.exception))

    def test_unreachable_endpoint(self, _print):
        client = StubClient(login_response=TransportError("ConnectionError: refused"))
        with self.assertRaises(ProvisioningError) as ctx:
            provision(client, "testuser", "password123")
        self.assertIn("unreachable", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, TransportError)

    def test_custom_token_path(self, _print):
        client = StubClient(login_response=ResponseWrapper(200, json_data={"access_token": "xyz"}))
        credential = provision(client, "u", "p", login_path="auth/login", token_path="access_token")
        self.assertEqual(credential.token, "xyz")
        self.assertEqual(client.login_calls[0]["target"], "auth/login")


class TestExtractPath(unittest.TestCase):
    def test_nested(self):
        self.assertEqual(extract_path({"data": {"token": "t"}}, "data.token"), "t")

    def test_missing_step(self):
        self.assertIsNone(extract_path({"data": None}, "data.token"))
        self.assertIsNone(extract_path(["data"], "data"))


if __name__ == '__main__':
    unittest.main()

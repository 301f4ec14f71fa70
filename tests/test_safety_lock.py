import unittest
import tempfile
import sys
import os
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from seatrush.safety_lock import SafetyLock


@patch('builtins.print')
class TestSafetyLock(unittest.TestCase):
    def test_local_targets_skip_consent(self, _print):
        for url in ("http://localhost:8080", "http://127.0.0.1:9000/api"):
            with patch('builtins.input') as prompt:
                SafetyLock(url).require_consent(False, 500)
                prompt.assert_not_called()

    def test_remote_target_accepts_phrase(self, _print):
        with patch('builtins.input', return_value="I AUTHORIZE LOAD"):
            SafetyLock("https://seats.example.com").require_consent(False, 10)

    def test_remote_target_wrong_phrase_aborts(self, _print):
        with patch('builtins.input', return_value="yes"):
            with self.assertRaises(SystemExit):
                SafetyLock("https://seats.example.com").require_consent(False, 10)

    def test_force_flag_skips_prompt(self, _print):
        with patch('builtins.input') as prompt:
            SafetyLock("https://seats.example.com").require_consent(True, 10)
            prompt.assert_not_called()

    def test_kill_switch(self, _print):
        with tempfile.TemporaryDirectory() as tmp:
            lock = SafetyLock("http://localhost", kill_file=os.path.join(tmp, "STOP.lock"))
            self.assertFalse(lock.kill_switch_engaged())
            open(lock.kill_file, "w").close()
            self.assertTrue(lock.kill_switch_engaged())


if __name__ == '__main__':
    unittest.main()

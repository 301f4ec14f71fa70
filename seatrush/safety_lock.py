import os
import sys
from urllib.parse import urlparse

from colorama import Fore, Style

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1", "0.0.0.0"}
CONSENT_PHRASE = "I AUTHORIZE LOAD"


class SafetyLock:
    """
    Kill switch and live-fire consent for load runs.
    """
    KILL_FILE = "STOP.lock"

    def __init__(self, target_url: str, kill_file: str = None):
        self.target = target_url
        self.kill_file = kill_file or self.KILL_FILE

    def kill_switch_engaged(self) -> bool:
        """True once the kill file exists; the scheduler polls this during a run."""
        return os.path.exists(self.kill_file)

    def is_local_target(self) -> bool:
        host = urlparse(self.target).hostname or ""
        return host in LOCAL_HOSTS

    def require_consent(self, force_flag: bool, concurrency: int):
        """
        Demands explicit consent before loading a non-local target,
        unless the automation flag is present.
        """
        if self.is_local_target():
            return

        if force_flag:
            print(f"{Fore.YELLOW}[SECURITY] AUTOMATION MODE ENGAGED (--force-live-fire){Style.RESET_ALL}")
            print(f"[SECURITY] Target {self.target} will receive load from {concurrency} clients immediately.")
            return

        print("\n" + "=" * 60)
        print(f"{Fore.RED}NON-LOCAL TARGET{Style.RESET_ALL}")
        print("=" * 60)
        print(f"Target: {self.target}")
        print(f"About to launch {concurrency} concurrent clients against it.")
        print("Only proceed against systems you own or are authorized to test.")
        print(f"\nType '{CONSENT_PHRASE}' to continue:")

        try:
            val = input("> ")
        except EOFError:
            print("Non-interactive mode (CI/CD) detected but --force-live-fire missing. Aborting.")
            sys.exit(2)
        if val.strip() != CONSENT_PHRASE:
            print("Authorization Failed. Aborting.")
            sys.exit(2)

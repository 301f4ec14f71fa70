import time
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional, List

from colorama import Fore, Style

from .forensics import ForensicLogger
from .http_client import HttpClient
from .models import Credential, OutcomeRecord, RunConfig
from .outcome_log import OutcomeLog
from .safety_lock import SafetyLock
from .virtual_client import VirtualClient

# How often the duration wait wakes up to check the kill switch
POLL_INTERVAL = 0.25
# Upper bound on waiting for worker threads to line up at the start barrier
START_TIMEOUT = 30.0


class LoadScheduler:
    """
    Holds a fixed population of virtual clients active for the run duration.

    Logic Flow:
    1. Spawn `concurrency` clients (ids 1..N), released together by a barrier
    2. Wait out the duration (kill switch and Ctrl+C end it early)
    3. Signal cooperative cancellation; in-flight requests finish
    4. Join every client and hand back the outcome log
    """
    def __init__(self, client: HttpClient, forensic_log: Optional[ForensicLogger] = None,
                 safety: Optional[SafetyLock] = None, verbose: bool = False):
        self.client = client
        self.logger = forensic_log
        self.safety = safety
        self.verbose = verbose
        self.elapsed_s: Optional[float] = None
        self.stop_reason: Optional[str] = None
        self.crashed_clients = 0

    def _on_win(self, record: OutcomeRecord):
        if self.logger:
            self.logger.log_event("SEAT_WON", {
                "client_id": record.client_id,
                "iteration": record.iteration,
                "status": record.status_code,
            })

    def run(self, config: RunConfig, credential: Credential) -> OutcomeLog:
        log = OutcomeLog()
        cancel = threading.Event()
        # +1 party: the scheduler itself starts the clock once everyone is lined up
        barrier = threading.Barrier(config.concurrency + 1)

        clients: List[VirtualClient] = [
            VirtualClient(i, config, credential, self.client, log,
                          on_win=self._on_win, verbose=self.verbose)
            for i in range(1, config.concurrency + 1)
        ]

        print(f"[*] Spawning {config.concurrency} virtual clients for {config.duration:g}s "
              f"(pacing {config.pacing_delay:g}s, timeout {config.request_timeout:g}s)...")

        with ThreadPoolExecutor(max_workers=config.concurrency, thread_name_prefix="vclient") as executor:
            futures = [executor.submit(c.loop, cancel, barrier) for c in clients]

            start = time.monotonic()
            try:
                try:
                    barrier.wait(timeout=START_TIMEOUT)
                except threading.BrokenBarrierError:
                    print(f"{Fore.YELLOW}[!] Not all clients reached the start line within {START_TIMEOUT:g}s. Starting anyway.{Style.RESET_ALL}")

                start = time.monotonic()
                if self.logger:
                    self.logger.log_event("LOAD_START", {"concurrency": config.concurrency, "duration_s": config.duration})

                self.stop_reason = self._wait_for_cutoff(futures, start + config.duration)
            except KeyboardInterrupt:
                print(f"\n{Fore.RED}[!] Interrupted (Ctrl+C). Stopping clients after their in-flight requests...{Style.RESET_ALL}")
                self.stop_reason = "interrupted"
            finally:
                cancel.set()
                # Releases any client still parked at the start line
                barrier.abort()

            wait(futures)
            self.elapsed_s = time.monotonic() - start

        for f in futures:
            exc = f.exception()
            if exc is not None:
                self.crashed_clients += 1
                print(f"{Fore.RED}[!] Virtual client crashed: {exc!r}{Style.RESET_ALL}")

        if self.logger:
            self.logger.log_event("LOAD_COMPLETE", {
                "requests": len(log),
                "elapsed_s": round(self.elapsed_s, 3),
                "stop_reason": self.stop_reason,
                "crashed_clients": self.crashed_clients,
            })
        print(f"[*] Load phase finished ({self.stop_reason}) after {self.elapsed_s:.2f}s: {len(log)} requests recorded.")
        return log

    def _wait_for_cutoff(self, futures, deadline: float) -> str:
        """Blocks until the deadline, the kill switch, or every client finishing on its own."""
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return "duration elapsed"
            if self.safety is not None and self.safety.kill_switch_engaged():
                print(f"\n{Fore.RED}[!!!] KILL SWITCH ACTIVATED. {self.safety.kill_file} detected. Stopping load.{Style.RESET_ALL}")
                return "kill switch"
            _, pending = wait(futures, timeout=min(remaining, POLL_INTERVAL))
            if not pending:
                return "iterations complete"

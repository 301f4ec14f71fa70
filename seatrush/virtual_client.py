import threading
from typing import Optional

from colorama import Fore, Style

from .classifier import classify
from .errors import TransportError
from .http_client import HttpClient
from .models import AttackRequest, Credential, Outcome, OutcomeRecord, ResponseWrapper, RunConfig
from .outcome_log import OutcomeLog


class VirtualClient:
    """
    One simulated user racing for the golden seat.
    Identity, config and credential are fixed at spawn time.
    """
    def __init__(self, client_id: int, config: RunConfig, credential: Credential,
                 client: HttpClient, log: OutcomeLog, on_win=None, verbose: bool = False):
        self.client_id = client_id
        self.config = config
        self.credential = credential
        self.client = client
        self.log = log
        self.on_win = on_win
        self.verbose = verbose
        self.issued = 0

    def build_request(self) -> AttackRequest:
        return AttackRequest(
            resource_id=self.config.resource_id,
            client_id=self.client_id,
            content=self.config.content_template.format(client_id=self.client_id),
            credential=self.credential,
        )

    def attack_once(self) -> OutcomeRecord:
        """Build, send, classify and record a single request."""
        request = self.build_request()
        try:
            response = self.client.send(
                "POST", request.path,
                headers=request.headers(),
                json_body=request.body(),
                timeout=self.config.request_timeout,
            )
        except TransportError as e:
            # Absorbed: a failed request is an unexpected outcome, not a crashed client
            response = ResponseWrapper.transport_failure(self.client.url_for(request.path), str(e))

        outcome = classify(response)
        self.issued += 1
        record = OutcomeRecord(
            client_id=self.client_id,
            iteration=self.issued,
            status_code=response.status_code,
            outcome=outcome,
            elapsed_ms=response.elapsed_ms,
            error=response.error,
        )
        self.log.append(record)

        if outcome == Outcome.WON:
            if self.verbose:
                print(f"{Fore.GREEN}[+] Client #{self.client_id} WON the seat (iteration {self.issued}){Style.RESET_ALL}")
            if self.on_win:
                self.on_win(record)
        return record

    def loop(self, cancel: threading.Event, start_barrier: Optional[threading.Barrier] = None) -> int:
        """
        Runs until cancel is set (or the per-client iteration cap is hit).
        Cancellation is only observed between requests. Returns requests issued.
        """
        if start_barrier is not None:
            try:
                start_barrier.wait()
            except threading.BrokenBarrierError:
                # Barrier aborted by a cancelled run, fall through to the cancel check
                pass

        while not cancel.is_set():
            self.attack_once()
            if self.config.iterations is not None and self.issued >= self.config.iterations:
                break
            # Pacing wakes immediately on cancellation
            if self.config.pacing_delay > 0 and cancel.wait(self.config.pacing_delay):
                break
        return self.issued

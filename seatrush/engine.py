from typing import Optional

from colorama import Fore, Style

from .errors import ProvisioningError
from .forensics import ForensicLogger
from .http_client import HttpClient
from .models import Credential, Report, RunConfig
from .provisioner import provision
from .reporting import summarize
from .safety_lock import SafetyLock
from .scheduler import LoadScheduler


class Engine:
    """
    Setup-then-fan-out run: provision one credential, unleash the
    virtual clients with it, then reduce their outcomes to a report.
    """
    def __init__(self, config: RunConfig, client: Optional[HttpClient] = None,
                 forensic_log: Optional[ForensicLogger] = None,
                 safety: Optional[SafetyLock] = None, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.client = client or HttpClient(
            config.base_url,
            timeout=config.request_timeout,
            verbose=verbose,
            pool_size=config.concurrency,
        )
        # Use provided logger or create an in-memory one
        self.logger = forensic_log if forensic_log else ForensicLogger(verbose=verbose)
        self.safety = safety
        self.credential: Optional[Credential] = None
        self.scheduler: Optional[LoadScheduler] = None

    def provision(self) -> Credential:
        """Fails fast: any ProvisioningError propagates and no load is generated."""
        try:
            credential = provision(
                self.client,
                self.config.username,
                self.config.password,
                login_path=self.config.login_path,
                token_path=self.config.token_path,
            )
        except ProvisioningError as e:
            self.logger.log_event("PROVISIONING_FAILED", {"error": str(e)})
            raise
        self.logger.log_event("PROVISIONED", {"username": self.config.username})
        return credential

    def run(self) -> Report:
        cfg = self.config
        print(f"[*] TARGET: {cfg.base_url} | VIDEO: {cfg.resource_id}")

        self.credential = self.provision()

        self.scheduler = LoadScheduler(self.client, forensic_log=self.logger,
                                       safety=self.safety, verbose=self.verbose)
        log = self.scheduler.run(cfg, self.credential)

        report = summarize(log, seat_limit=cfg.seat_limit, elapsed_s=self.scheduler.elapsed_s)
        if not report.exclusivity_held:
            print(f"{Fore.RED}[!] Exclusivity violated: {report.won} winners for {cfg.seat_limit} seat(s).{Style.RESET_ALL}")
        return report

import time
import uuid
from typing import Optional, Dict, Any

import requests
from requests.adapters import HTTPAdapter
from colorama import Fore, Style

from .errors import TransportError
from .models import ResponseWrapper

USER_AGENT = "seatrush/1.0 (golden-seat contention harness)"


class HttpClient:
    """
    Pooled HTTP client shared by every virtual client of a run.
    No retries: each call is exactly one request, so outcome counts
    match what the server actually saw.
    """
    def __init__(self, base_url: str, timeout: float = 10.0, verbose: bool = False,
                 pool_size: int = 50, headers: Optional[Dict[str, str]] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verbose = verbose
        self.global_headers = headers or {}
        self.session = requests.Session()

        # One pooled connection per virtual client, otherwise urllib3 discards
        # sockets and clients queue behind each other
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        # Traffic tag for correlating server logs with a run
        self.canary_id = str(uuid.uuid4())[:8]

        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "X-Seatrush-ID": self.canary_id,
        })

        if self.verbose:
            print(f"[*] HttpClient initialized. Traffic Tag: X-Seatrush-ID: {self.canary_id} | Pool: {pool_size}")

    def url_for(self, target: str) -> str:
        return target if target.startswith("http") else f"{self.base_url}/{target.lstrip('/')}"

    def send(self, method: str, target: str, *,
             headers: Optional[Dict[str, str]] = None,
             json_body: Optional[Any] = None,
             timeout: Optional[float] = None) -> ResponseWrapper:
        """
        Sends one request and wraps the response.
        Raises TransportError if no HTTP response was received.
        """
        url = self.url_for(target)

        request_headers = dict(self.global_headers)
        if headers:
            request_headers.update(headers)

        start_time = time.perf_counter()
        try:
            resp = self.session.request(
                method=method.upper(),
                url=url,
                headers=request_headers,
                json=json_body,
                timeout=timeout or self.timeout,
            )
        except requests.RequestException as e:
            elapsed = (time.perf_counter() - start_time) * 1000.0
            if self.verbose:
                print(f"{Fore.RED}[x] {method.upper()} {url} failed after {elapsed:.0f}ms: {e}{Style.RESET_ALL}")
            raise TransportError(f"{type(e).__name__}: {e}") from e

        elapsed = (time.perf_counter() - start_time) * 1000.0

        # Best-effort JSON parsing
        json_data = None
        try:
            json_data = resp.json()
        except ValueError:
            pass

        if self.verbose:
            status_color = Fore.GREEN if resp.status_code < 400 else Fore.YELLOW if resp.status_code < 500 else Fore.RED
            print(f"{status_color}[<] {resp.status_code} {resp.reason} ({elapsed:.0f}ms) | {method.upper()} {url}{Style.RESET_ALL}")

        return ResponseWrapper(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            text=resp.text,
            elapsed_ms=elapsed,
            url=str(resp.url),
            json_data=json_data,
        )

    def close(self):
        self.session.close()

import math
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from enum import Enum

from .errors import ConfigError

# Status recorded when a request never got an HTTP response
TRANSPORT_FAILURE_STATUS = 0

DEFAULT_CONTENT_TEMPLATE = "attacker #{client_id} claiming the golden seat!"


class Outcome(str, Enum):
    WON = "WON"
    REJECTED_EXPECTED = "REJECTED_EXPECTED"
    REJECTED_UNEXPECTED = "REJECTED_UNEXPECTED"


@dataclass(frozen=True)
class Credential:
    token: str

    def __post_init__(self):
        if not isinstance(self.token, str) or not self.token.strip():
            raise ValueError("Credential token must be a non-empty string")

    def authorization(self) -> str:
        return f"Bearer {self.token}"

    def __repr__(self):
        # Keep tokens out of tracebacks and verbose output
        return f"Credential(token='{self.token[:6]}...')"


@dataclass(frozen=True)
class RunConfig:
    base_url: str
    resource_id: str
    concurrency: int
    duration: float  # seconds
    pacing_delay: float  # seconds
    username: str
    password: str
    request_timeout: float = 10.0
    iterations: Optional[int] = None  # per-client cap, None = until duration elapses
    seat_limit: int = 1
    login_path: str = "api/v1/users/login"
    token_path: str = "data.token"
    content_template: str = DEFAULT_CONTENT_TEMPLATE

    def __post_init__(self):
        if not self.base_url or not str(self.base_url).startswith(("http://", "https://")):
            raise ConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if not str(self.resource_id).strip():
            raise ConfigError("resource_id must not be empty")
        for name in ("duration", "pacing_delay", "request_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number of seconds, got {value!r}")
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int) or self.concurrency <= 0:
            raise ConfigError(f"concurrency must be a positive integer, got {self.concurrency!r}")
        if self.duration <= 0:
            raise ConfigError(f"duration must be positive, got {self.duration!r}")
        if self.pacing_delay < 0:
            raise ConfigError(f"pacing_delay must not be negative, got {self.pacing_delay!r}")
        if self.request_timeout <= 0:
            raise ConfigError(f"request_timeout must be positive, got {self.request_timeout!r}")
        if self.iterations is not None and self.iterations <= 0:
            raise ConfigError(f"iterations must be positive when set, got {self.iterations!r}")
        if self.seat_limit < 1:
            raise ConfigError(f"seat_limit must be at least 1, got {self.seat_limit!r}")
        if not self.username:
            raise ConfigError("username is required for provisioning")
        if "{client_id}" not in self.content_template:
            raise ConfigError("content_template must contain a {client_id} placeholder")

    def to_dict(self) -> Dict[str, Any]:
        """Run parameters safe to print or export (password excluded)."""
        return {
            "base_url": self.base_url,
            "resource_id": self.resource_id,
            "concurrency": self.concurrency,
            "duration_s": self.duration,
            "pacing_delay_s": self.pacing_delay,
            "request_timeout_s": self.request_timeout,
            "iterations": self.iterations,
            "seat_limit": self.seat_limit,
            "username": self.username,
        }


@dataclass(frozen=True)
class AttackRequest:
    """One contention request, built fresh on every loop iteration."""
    resource_id: str
    client_id: int
    content: str
    credential: Credential

    @property
    def path(self) -> str:
        return f"api/v1/videos/{self.resource_id}/golden_comment"

    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": self.credential.authorization(),
        }

    def body(self) -> Dict[str, str]:
        return {"content": self.content}


@dataclass
class ResponseWrapper:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    elapsed_ms: float = 0.0
    url: str = ""
    json_data: Optional[Any] = None
    error: Optional[str] = None

    @property
    def is_success(self):
        return 200 <= self.status_code < 300

    @classmethod
    def transport_failure(cls, url: str, error: str, elapsed_ms: float = 0.0) -> "ResponseWrapper":
        return cls(status_code=TRANSPORT_FAILURE_STATUS, url=url, elapsed_ms=elapsed_ms, error=error)


@dataclass(frozen=True)
class OutcomeRecord:
    client_id: int
    iteration: int
    status_code: int
    outcome: Outcome
    elapsed_ms: float = 0.0
    error: Optional[str] = None


@dataclass
class Report:
    total: int
    won: int
    rejected_expected: int
    rejected_unexpected: int
    seat_limit: int = 1
    status_counts: Dict[int, int] = field(default_factory=dict)
    winners: List[int] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    p50_ms: Optional[float] = None
    p95_ms: Optional[float] = None
    elapsed_s: Optional[float] = None

    @property
    def exclusivity_held(self) -> bool:
        return self.won <= self.seat_limit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "total": self.total,
                "won": self.won,
                "rejected_expected": self.rejected_expected,
                "rejected_unexpected": self.rejected_unexpected,
                "seat_limit": self.seat_limit,
                "exclusivity_held": self.exclusivity_held,
            },
            "status_counts": {str(k): v for k, v in sorted(self.status_counts.items())},
            "winners": list(self.winners),
            "errors": list(self.errors),
            "latency": {"p50_ms": self.p50_ms, "p95_ms": self.p95_ms},
            "elapsed_s": self.elapsed_s,
        }

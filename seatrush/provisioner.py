from typing import Any, Optional

from colorama import Fore, Style

from .errors import ProvisioningError, TransportError
from .http_client import HttpClient
from .models import Credential

DEFAULT_LOGIN_PATH = "api/v1/users/login"
DEFAULT_TOKEN_PATH = "data.token"


def extract_path(data: Any, dotted_path: str) -> Optional[Any]:
    """Walks a dotted path ("data.token") through nested dicts. None if any step is missing."""
    current = data
    for key in dotted_path.split("."):
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def provision(client: HttpClient, username: str, password: str,
              login_path: str = DEFAULT_LOGIN_PATH,
              token_path: str = DEFAULT_TOKEN_PATH) -> Credential:
    """
    Logs in once and returns the bearer credential shared by every virtual client.

    Exactly one login request is sent. Any failure (unreachable endpoint,
    non-2xx status, non-JSON body, missing or empty token) raises
    ProvisioningError; the caller must not start the load phase.
    """
    login_url = client.url_for(login_path)
    print(f"[*] Provisioning credential: POST {login_url} as '{username}'")

    try:
        resp = client.send(
            "POST", login_path,
            headers={"Content-Type": "application/json"},
            json_body={"username": username, "password": password},
        )
    except TransportError as e:
        raise ProvisioningError(f"Login endpoint unreachable ({login_url}): {e}") from e

    if not resp.is_success:
        reason = ""
        if isinstance(resp.json_data, dict) and resp.json_data.get("error"):
            reason = f": {resp.json_data['error']}"
        raise ProvisioningError(f"Login rejected with HTTP {resp.status_code}{reason}")

    if resp.json_data is None:
        raise ProvisioningError(f"Login response is not JSON (HTTP {resp.status_code}): {resp.text[:200]!r}")

    token = extract_path(resp.json_data, token_path)
    if token is None:
        raise ProvisioningError(f"Login response has no token at '{token_path}'")
    if not isinstance(token, str):
        raise ProvisioningError(f"Token at '{token_path}' is {type(token).__name__}, expected a string")
    if not token.strip():
        raise ProvisioningError(f"Token at '{token_path}' is empty")

    print(f"{Fore.GREEN}[+] Credential acquired ({len(token)} chars).{Style.RESET_ALL}")
    return Credential(token=token)

import argparse
import datetime
import sys

from colorama import Fore, Style, init

from seatrush import __version__
from seatrush.config import build_run_config, get_default_config_path, load_config_file
from seatrush.engine import Engine
from seatrush.errors import ConfigError, ProvisioningError
from seatrush.forensics import ForensicLogger
from seatrush.reporting import ConsoleReporter, generate_json_report
from seatrush.safety_lock import SafetyLock

EXIT_OK = 0
EXIT_EXCLUSIVITY_VIOLATED = 1
EXIT_ABORTED = 2

BANNER = r"""
  ___  ___   _ _____ ___ _   _ ___ _  _
 / __|| __| /_\_   _| _ \ | | / __| || |
 \__ \| _| / _ \| | |   / |_| \__ \ __ |
 |___/|___/_/ \_\_| |_|_\\___/|___/_||_|
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seatrush",
        description="SEATRUSH // golden-seat contention harness",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument("-v", "--version", action="version", version=f"SEATRUSH v{__version__}")

    target_group = parser.add_argument_group("Targeting")
    target_group.add_argument("--config", help="YAML run file (defaults to the packaged default_run.yaml)")
    target_group.add_argument("--base-url", help="Target URL (e.g., http://localhost:8080)")
    target_group.add_argument("--video-id", "--resource-id", dest="resource_id", help="Video holding the golden seat")
    target_group.add_argument("--force-live-fire", action="store_true", help="Skip the consent prompt for non-local targets")

    load_group = parser.add_argument_group("Load")
    load_group.add_argument("--vus", "--concurrency", dest="concurrency", type=int, help="Concurrent virtual clients")
    load_group.add_argument("--duration", help="Run duration (e.g., 30s, 1m)")
    load_group.add_argument("--pacing", dest="pacing_delay", help="Delay between requests per client (e.g., 1s, 250ms)")
    load_group.add_argument("--timeout", dest="request_timeout", help="Per-request timeout (e.g., 10s)")
    load_group.add_argument("--iterations", type=int, help="Stop each client after N requests")
    load_group.add_argument("--seats", dest="seat_limit", type=int, help="Winners allowed before exclusivity counts as violated")

    auth_group = parser.add_argument_group("Authentication")
    auth_group.add_argument("-u", "--username")
    auth_group.add_argument("-p", "--password")
    auth_group.add_argument("--login-path", help="Login endpoint path")
    auth_group.add_argument("--token-path", help="Dotted path of the token in the login response")

    out_group = parser.add_argument_group("Reporting")
    out_group.add_argument("--json-report", help="Path to JSON output")
    out_group.add_argument("--audit-log", help="Path to the hash-chained audit log (JSON lines)")
    out_group.add_argument("--audit-key", help="HMAC key for signing the run (random if omitted; keep it to verify the signature later)")
    out_group.add_argument("--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    init(autoreset=True)
    argv = list(sys.argv[1:] if argv is None else argv)

    # "seatrush http://host:port ..." shorthand
    if argv and argv[0].startswith("http"):
        argv.insert(0, "--base-url")

    args = build_parser().parse_args(argv)

    print(f"{Fore.YELLOW}{BANNER}{Style.RESET_ALL}")
    print(f"{Fore.YELLOW}   SEATRUSH // one seat, many hands{Style.RESET_ALL}\n")

    overrides = {
        "base_url": args.base_url,
        "resource_id": args.resource_id,
        "concurrency": args.concurrency,
        "duration": args.duration,
        "pacing_delay": args.pacing_delay,
        "request_timeout": args.request_timeout,
        "iterations": args.iterations,
        "seat_limit": args.seat_limit,
        "username": args.username,
        "password": args.password,
        "login_path": args.login_path,
        "token_path": args.token_path,
    }
    try:
        file_values = load_config_file(args.config or get_default_config_path())
        config = build_run_config(file_values, overrides)
    except ConfigError as e:
        print(f"{Fore.RED}[!!!] FATAL: Invalid configuration: {e}{Style.RESET_ALL}", file=sys.stderr)
        return EXIT_ABORTED

    safety = SafetyLock(config.base_url)
    safety.require_consent(args.force_live_fire, config.concurrency)

    audit_path = args.audit_log
    logger = ForensicLogger(log_file=audit_path, verbose=args.verbose, session_key=args.audit_key)
    logger.log_event("RUN_CONFIG", config.to_dict())
    if audit_path:
        print(f"[*] Forensic Audit Log Initialized: {audit_path}")

    engine = Engine(config, forensic_log=logger, safety=safety, verbose=args.verbose)
    try:
        report = engine.run()
    except ProvisioningError as e:
        print(f"\n{Fore.RED}[!!!] FATAL: Provisioning failed: {e}{Style.RESET_ALL}", file=sys.stderr)
        print(f"{Fore.RED}      No virtual client was started. No report produced.{Style.RESET_ALL}", file=sys.stderr)
        logger.sign_run()
        return EXIT_ABORTED
    finally:
        engine.client.close()

    integrity = logger.sign_run()
    ConsoleReporter().print_summary(report)

    if args.json_report:
        run_meta = dict(config.to_dict())
        run_meta.update({
            "run_id": integrity["run_id"],
            "final_hash": integrity["final_hash"],
            "signature": integrity["signature"],
            "finished_at": datetime.datetime.now().isoformat(),
        })
        try:
            generate_json_report(report, args.json_report, run_meta)
        except OSError as e:
            print(f"{Fore.RED}Failed to write JSON report: {e}{Style.RESET_ALL}")

    return EXIT_OK if report.exclusivity_held else EXIT_EXCLUSIVITY_VIOLATED


if __name__ == "__main__":
    sys.exit(main())

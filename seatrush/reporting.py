import json
from collections import Counter
from typing import Optional, List

from colorama import init, Fore, Style

from .models import Outcome, Report, TRANSPORT_FAILURE_STATUS
from .outcome_log import OutcomeLog

init()

MAX_ERROR_SAMPLES = 5


def _percentile(sorted_values: List[float], fraction: float) -> Optional[float]:
    if not sorted_values:
        return None
    index = min(len(sorted_values) - 1, int(len(sorted_values) * fraction))
    return round(sorted_values[index], 1)


def summarize(log: OutcomeLog, seat_limit: int = 1, elapsed_s: Optional[float] = None) -> Report:
    """
    Reduces the final outcome log to a report. Run exactly once,
    after the scheduler has joined every client.
    """
    records = log.records()
    counts = Counter(r.outcome for r in records)

    winners = sorted({r.client_id for r in records if r.outcome == Outcome.WON})

    errors = []
    for r in records:
        if r.error and r.error not in errors:
            errors.append(r.error)
            if len(errors) >= MAX_ERROR_SAMPLES:
                break

    # Transport failures carry no server latency
    latencies = sorted(r.elapsed_ms for r in records if r.status_code != TRANSPORT_FAILURE_STATUS)

    return Report(
        total=len(records),
        won=counts.get(Outcome.WON, 0),
        rejected_expected=counts.get(Outcome.REJECTED_EXPECTED, 0),
        rejected_unexpected=counts.get(Outcome.REJECTED_UNEXPECTED, 0),
        seat_limit=seat_limit,
        status_counts=dict(Counter(r.status_code for r in records)),
        winners=winners,
        errors=errors,
        p50_ms=_percentile(latencies, 0.5),
        p95_ms=_percentile(latencies, 0.95),
        elapsed_s=round(elapsed_s, 3) if elapsed_s is not None else None,
    )


class ConsoleReporter:
    def print_summary(self, report: Report):
        print("\n" + "=" * 60)
        print(f"{Style.BRIGHT}GOLDEN SEAT CONTENTION REPORT{Style.RESET_ALL}")
        print("=" * 60)

        print(f"Total Requests:      {report.total}")
        print(f"WON (201):           {Fore.GREEN}{report.won}{Style.RESET_ALL}")
        print(f"REJECTED (400/500):  {Fore.YELLOW}{report.rejected_expected}{Style.RESET_ALL}")
        unexpected_color = Fore.RED if report.rejected_unexpected else Fore.GREEN
        print(f"UNEXPECTED:          {unexpected_color}{report.rejected_unexpected}{Style.RESET_ALL}")

        if report.status_counts:
            codes = ", ".join(f"{code}={n}" for code, n in sorted(report.status_counts.items()))
            print(f"Status Codes:        {codes}")
        if report.p50_ms is not None:
            print(f"Latency:             p50 {report.p50_ms:.0f}ms | p95 {report.p95_ms:.0f}ms")
        if report.elapsed_s is not None:
            print(f"Elapsed:             {report.elapsed_s:.2f}s")

        if report.winners:
            print(f"Winning Clients:     {', '.join(f'#{w}' for w in report.winners)}")

        if report.rejected_unexpected:
            print(f"\n{Fore.RED}[!] {report.rejected_unexpected} requests ended outside the expected status vocabulary.{Style.RESET_ALL}")
            print("    This points at a system fault, not contention. Investigate separately.")
            for e in report.errors:
                print(f"      {Fore.YELLOW}- {e}{Style.RESET_ALL}")

        if report.total == 0:
            print(f"\n{Fore.YELLOW}[!] No requests were issued during the run.{Style.RESET_ALL}")

        if report.exclusivity_held:
            print(f"\n{Style.BRIGHT}Exclusivity: {Fore.GREEN}HELD{Style.RESET_ALL} "
                  f"({report.won} winner(s), limit {report.seat_limit})")
        else:
            print(f"\n{Style.BRIGHT}Exclusivity: {Fore.RED}VIOLATED{Style.RESET_ALL} "
                  f"({report.won} winners, limit {report.seat_limit})")
        print("=" * 60 + "\n")


def generate_json_report(report: Report, output_path: str, run_meta: Optional[dict] = None):
    data = report.to_dict()
    if run_meta:
        data["run"] = run_meta
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    print(f"JSON Report written to: {output_path}")

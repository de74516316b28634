#!/usr/bin/env python3
"""
Run the compliance checks from the command line.

Intended for a system cron job on hosts that do not expose the HTTP
cron route. Runs every compliance rule for one organisation, or for
every active organisation, and prints a per-rule summary.

Usage:
    python -m backend.src.scripts.run_compliance_checks [--organisation GUID] [--json]

Options:
    -o, --organisation  Only check this organisation (org_xxx)
    --json              Print the results as JSON
    --help              Show this help message

Exit status is 0 when the run completed (individual rule failures are
reported in the summary), 1 when the organisation is unknown or the run
could not start.
"""

import argparse
import asyncio
import json
import signal
import sys
from typing import List, Optional, Sequence

from backend.src.db.database import SessionFactory
from backend.src.services.compliance_runner import (
    ComplianceCheckRunner,
    OrganisationRunResult,
)
from backend.src.services.exceptions import NotFoundError


def signal_handler(signum, frame):
    """Handle CTRL+C gracefully."""
    print("\n\nOperation interrupted by user.")
    sys.exit(130)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Run CareLedger compliance checks and alert managers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s --organisation org_01hgw2bbg00000000000000001 --json

Notes:
  - Alerts already sent in the last 24 hours are not repeated
  - Set CARELEDGER_DB_URL to point at the target database
        """
    )

    parser.add_argument(
        "-o", "--organisation",
        help="Only check the organisation with this GUID"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON"
    )

    return parser.parse_args(argv)


def _result_as_dict(result: OrganisationRunResult) -> dict:
    data = {
        "organisation_guid": result.organisation_guid,
        "organisation_name": result.organisation_name,
    }
    if result.summary is not None:
        data.update(result.summary.as_dict())
    if result.error is not None:
        data["error"] = result.error
    return data


def print_results(results: List[OrganisationRunResult], as_json: bool = False) -> None:
    """Print run results as a table-like summary or as JSON."""
    if as_json:
        print(json.dumps([_result_as_dict(r) for r in results], indent=2))
        return

    for result in results:
        print("\n" + "=" * 50)
        print(f"{result.organisation_name} ({result.organisation_guid})")
        print("=" * 50)
        if result.summary is None:
            print(f"  [ERROR] {result.error}")
            continue
        for outcome in result.summary.outcomes:
            value = outcome.count if outcome.ok else f"error: {outcome.error}"
            print(f"  {outcome.name:<24} {value}")
        print(f"  {'total_created':<24} {result.summary.total_created}")

    if not results:
        print("No active organisations.")


async def run(
    organisation_guid: Optional[str],
    session_factory: Optional[SessionFactory] = None,
) -> List[OrganisationRunResult]:
    """Run the checks for one organisation or for every active one."""
    if session_factory is None:
        from backend.src.db.database import SessionLocal
        session_factory = SessionLocal

    runner = ComplianceCheckRunner(session_factory)
    if organisation_guid:
        return [await runner.run_for_organisation(organisation_guid)]
    return await runner.run_for_active_organisations()


def main(
    argv: Optional[Sequence[str]] = None,
    session_factory: Optional[SessionFactory] = None,
) -> int:
    """Main entry point. Returns the process exit status."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_args(argv)

    try:
        results = asyncio.run(run(args.organisation, session_factory))
    except NotFoundError:
        print(f"Error: Organisation not found: {args.organisation}")
        return 1
    except Exception as e:
        print(f"\n[ERROR] Compliance run could not start: {e}")
        return 1

    print_results(results, as_json=args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())

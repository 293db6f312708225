"""
Data correction script to rewrite stale cached totals on daily logs.

Older versions stored each log's gross total and individual share and
did not always refresh them when a log was edited. This script recomputes
both, along with every task subtotal, from the tasks and presence list.

Run with: python scripts/recompute_daily_log_totals.py [--dry-run]
"""

import sys
import os
import argparse

# Add parent directory to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from crewledger.fastapi.core.config import get_settings
from crewledger.fastapi.dependencies.database import SessionLocal, init_db
from crewledger.fastapi.crud.daily_log import log_to_snapshot, repair_cached_totals
from crewledger.payroll.earnings import recompute_totals


def recompute_totals_in_db(dry_run: bool = False) -> int:
    """
    Rewrite stale cached totals for all daily logs.

    Args:
        dry_run: If True, only show what would be changed without committing

    Returns:
        Number of logs whose cached totals were stale
    """
    settings = get_settings(os.environ.get("ENV_MODE", "dev"))
    init_db(settings.DB_URL)

    db = SessionLocal()
    try:
        stale = repair_cached_totals(db, dry_run=True)
        # Old values are captured before the repair overwrites them
        before = {log.id: (log.total_gross_earnings, log.individual_earnings) for log in stale}

        print(f"\n{'='*80}")
        print("Daily Log Totals Correction Script")
        print(f"{'='*80}")
        print(f"Mode: {'DRY RUN' if dry_run else 'LIVE UPDATE'}")
        print(f"Logs with stale totals: {len(stale)}")
        print(f"{'='*80}\n")

        # Print first 10 changes as sample
        for log in stale[:10]:
            totals = recompute_totals(log_to_snapshot(log))
            old_gross, old_share = before[log.id]
            print(f"Log {log.log_date}")
            print(f"  Gross: {old_gross} -> {totals.total_gross_earnings}")
            print(f"  Share: {old_share} -> {totals.individual_earnings} "
                  f"({totals.workers_present} present)")
            print()

        if dry_run:
            print("DRY RUN MODE - No changes were made to the database")
            print("  Run without --dry-run to apply changes\n")
        elif stale:
            repair_cached_totals(db)
            print("Changes committed to database\n")

        return len(stale)
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Recompute cached daily log totals")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show stale logs without changing them"
    )
    args = parser.parse_args()

    recompute_totals_in_db(dry_run=args.dry_run)

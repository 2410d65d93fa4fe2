"""
Runnable script for the NToken ledger.
"""

import argparse
import sys

from ntoken.main import main as run_ledger


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="NToken ledger")
    parser.add_argument("batch", help="JSON file with accounts and the actions to apply")
    parser.add_argument("--init-db", action="store_true", help="Create the schema before processing")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    results = run_ledger(args.batch, debug=args.debug, create_schema=args.init_db)
    sys.exit(0 if all(r.is_valid for r in results) else 1)

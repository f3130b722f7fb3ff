#!/usr/bin/env python3
"""Parse the Commerce Control List from a local XML file or an eCFR snapshot."""

import sys
import argparse
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dotenv import load_dotenv

load_dotenv()

from ccl.collection import VersionStore
from ccl.exceptions import CclError
from ccl.parser import parse_ccl_file


def main():
    parser = argparse.ArgumentParser(description="Parse Part 774 (Commerce Control List)")
    parser.add_argument(
        "--input",
        type=Path,
        default=None,
        help="Local title XML file to parse"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("data/processed/ccl.json"),
        help="Where to write the parsed JSON (with --input)"
    )
    parser.add_argument(
        "--date",
        default=None,
        help="Snapshot date (YYYY-MM-DD) to download; defaults to the latest"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Re-download even if the snapshot is already stored"
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List stored snapshots and exit"
    )
    args = parser.parse_args()

    try:
        if args.list:
            print("\n=== Stored Versions ===\n")
            for summary in VersionStore().list_versions():
                print(f"{summary.date}  eccns={summary.counts.get('eccns', 0)}  fetched={summary.fetched_at}")
            return

        if args.input:
            print(f"\n=== Parsing {args.input} ===\n")
            result = parse_ccl_file(args.input, args.output)
        else:
            store = VersionStore()
            print("\n=== Loading eCFR snapshot ===\n")
            if args.date:
                result = store.load_version(args.date, force=args.force)
            else:
                result = store.load_default_version(force=args.force)
    except CclError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    for supplement in result.supplements:
        print(f"Supplement No. {supplement.number}: {supplement.metadata.eccn_count} ECCNs")
    print(f"\nTotal: {result.counts}")


if __name__ == "__main__":
    main()

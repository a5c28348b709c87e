#!/usr/bin/env python3
"""Generate sample library data files.

Writes users, books and loans as JSON files (one per entity type) built by
``LibraryScenario``, so every loan history obeys the loan policy. The files
can be used to seed a development API or for manual validation.

Usage:
    python scripts/generate_sample_data.py
    python scripts/generate_sample_data.py --users 200 --books 500 --seed 7
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from library_client.generators import LibraryScenario
from library_client.logging import setup_logging
from library_client.reports import late_fee_total, user_counts
from library_client.serialization import to_dict

logger = logging.getLogger(__name__)


def save_json(data: list, filename: str, output_dir: Path) -> None:
    """Save data to JSON file."""
    filepath = output_dir / filename
    serialized = [to_dict(item) for item in data]
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(serialized, f, indent=2, ensure_ascii=False)
    logger.info("Saved %d records to %s", len(data), filepath)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate sample library data")
    parser.add_argument("--users", type=int, default=20, help="Number of users (default: 20)")
    parser.add_argument("--books", type=int, default=40, help="Number of books (default: 40)")
    parser.add_argument("--admins", type=int, default=1, help="Number of admin users (default: 1)")
    parser.add_argument("--late-rate", type=float, default=0.25, help="Probability of a late return")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--output",
        type=Path,
        default=project_root / "local",
        help="Output directory (default: ./local)",
    )
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    return parser.parse_args()


def main() -> None:
    """Generate all sample data files."""
    args = parse_args()
    setup_logging(args.log_level)

    output_dir: Path = args.output
    output_dir.mkdir(parents=True, exist_ok=True)

    scenario = LibraryScenario(
        num_users=args.users,
        num_books=args.books,
        admin_count=args.admins,
        late_rate=args.late_rate,
        seed=args.seed,
    )
    store = scenario.generate()

    save_json(list(store.users.values()), "users.json", output_dir)
    save_json(list(store.books.values()), "books.json", output_dir)
    save_json(list(store.loans.values()), "loans.json", output_dir)

    counts = user_counts(store.users.values(), scenario.now)
    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    for name, value in store.summary().items():
        print(f"{name + ':':18}{value}")
    print(f"{'banned users:':18}{counts['banned']}")
    print(f"{'late fees:':18}{late_fee_total(store.loans.values())} TL")
    print(f"{'unpaid fees:':18}{late_fee_total(store.loans.values(), unpaid_only=True)} TL")
    print(f"\nAll files saved to: {output_dir}")
    print("=" * 60)


if __name__ == "__main__":
    main()

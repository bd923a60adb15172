"""Storefront Reviews management CLI.

Provides commands to create and drop the database schema and to rebuild
every product's displayed rating from its approved reviews.

Usage:
    python src/manage.py setup-db           # Create all tables
    python src/manage.py drop-db            # Drop all tables
    python src/manage.py recompute-ratings  # Self-heal stale product ratings
"""

import argparse
import sys


def _domain():
    from reviews.domain import reviews

    print("Initializing reviews domain...")
    reviews.init()
    return reviews


def setup_database():
    """Create the database schema for the reviews domain."""
    from reviews.utils.db import setup_db

    domain = _domain()
    print("Creating reviews database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    """Drop the database schema for the reviews domain."""
    from reviews.utils.db import drop_db

    domain = _domain()
    print("Dropping reviews database schema...")
    drop_db(domain)
    print("Done.")


def recompute_ratings(product_ids=None):
    """Recompute the displayed rating of the given (or every) product."""
    from reviews.product.rating import RatingAggregator

    domain = _domain()
    aggregator = RatingAggregator()

    with domain.domain_context():
        if product_ids:
            results = {product_id: aggregator.recompute(product_id) for product_id in product_ids}
        else:
            results = aggregator.recompute_all()

    for product_id, (rating, count) in results.items():
        print(f"  {product_id}: {rating} ({count} approved reviews)")
    print(f"Recomputed {len(results)} product rating(s).")


def main():
    from reviews.utils.logging import configure_logging

    parser = argparse.ArgumentParser(description="Storefront Reviews management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    recompute_parser = subparsers.add_parser("recompute-ratings", help="Recompute product ratings")
    recompute_parser.add_argument(
        "--product",
        dest="product_ids",
        nargs="*",
        help="Specific product id(s) to recompute (default: all)",
    )

    args = parser.parse_args()
    configure_logging()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "recompute-ratings":
        recompute_ratings(args.product_ids)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

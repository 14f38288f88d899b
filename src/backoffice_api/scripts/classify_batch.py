"""Batch classification of imported bank transactions with coverage reporting."""

import argparse
import logging

from sqlalchemy.orm import Session

from backoffice_api.db.session import SessionLocal
from backoffice_api.repositories.bank_transaction_repository import (
    BankTransactionRepository,
)
from backoffice_api.services.transaction_classifier import TransactionType, classify_batch

logger = logging.getLogger(__name__)

FALLBACK_TYPES = frozenset({TransactionType.INCOME_OTHER, TransactionType.EXPENSE_OTHER})


def get_coverage_stats(db: Session) -> dict[str, float | int]:
    """Get classification coverage for bank transactions."""
    counts = BankTransactionRepository(db).count_by_type()
    total = sum(counts.values())
    unclassified = counts.get(None, 0)
    fallback = sum(counts.get(t.value, 0) for t in FALLBACK_TYPES)
    classified = total - unclassified

    return {
        "total": total,
        "classified": classified,
        "unclassified": unclassified,
        "fallback": fallback,
        "coverage_percentage": (
            (classified - fallback) / total * 100 if total > 0 else 0
        ),
    }


def print_stats_report(db: Session) -> None:
    """Print a coverage statistics report."""
    stats = get_coverage_stats(db)
    counts = BankTransactionRepository(db).count_by_type()
    distribution = sorted(
        ((t, n) for t, n in counts.items() if t is not None),
        key=lambda item: item[1],
        reverse=True,
    )

    print()
    print("=" * 60)
    print("=== Bank Transaction Classification Report ===")
    print()
    print(f"Total transactions: {stats['total']}")
    print(f"Classified: {stats['classified']}")
    print(
        f"Matched a rule: {stats['classified'] - stats['fallback']} "
        f"({stats['coverage_percentage']:.1f}%)"
    )
    print(f"Fallback (INCOME_OTHER / EXPENSE_OTHER): {stats['fallback']}")
    print(f"Unclassified: {stats['unclassified']}")
    print()

    if distribution:
        print("Type Distribution:")
        print("-" * 40)
        for transaction_type, count in distribution:
            print(f"  {transaction_type}: {count}")
    print()


def run_classification(
    stats_only: bool = False,
    dry_run: bool = False,
    limit: int | None = None,
    company_id: str | None = None,
    db: Session | None = None,
) -> dict[int, TransactionType]:
    """Run batch classification.

    Args:
        stats_only: Only show statistics, don't classify.
        dry_run: Show what would be classified without saving.
        limit: Maximum number of transactions to classify.
        company_id: Restrict to one company.
        db: Session to use (a new one is opened and closed if None).

    Returns:
        Mapping of transaction ID to assigned type.
    """
    owns_session = db is None
    session = db if db is not None else SessionLocal()
    try:
        if stats_only:
            print_stats_report(session)
            return {}

        repo = BankTransactionRepository(session)
        unclassified = repo.list_unclassified(company_id=company_id, limit=limit)

        if not unclassified:
            print("No unclassified transactions to process.")
            print_stats_report(session)
            return {}

        print()
        print("=== Batch Classification ===")
        print()
        print(f"Processing {len(unclassified)} unclassified transactions...")
        if dry_run:
            print("(DRY RUN - no changes will be saved)")
        print()

        results = classify_batch(
            (txn.id, txn.description, txn.amount) for txn in unclassified
        )
        matched = sum(1 for t in results.values() if t not in FALLBACK_TYPES)
        print(f"Matched by rules: {matched}")
        print(f"Fallback type: {len(results) - matched}")

        if dry_run:
            print()
            print("Sample classifications (first 10):")
            print("-" * 60)
            for txn in unclassified[:10]:
                print(f"  {txn.description[:50]}")
                print(f"    → {results[txn.id].value}")
            return results  # type: ignore[return-value]

        for txn_id, transaction_type in results.items():
            repo.set_type(txn_id, transaction_type.value)  # type: ignore[arg-type]
        session.commit()
        logger.info("Applied %d classifications", len(results))
        print()
        print(f"Applied {len(results)} classifications.")

        print_stats_report(session)
        return results  # type: ignore[return-value]
    finally:
        if owns_session:
            session.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Classify imported bank transactions using the rule tables"
    )
    parser.add_argument(
        "--stats-only",
        action="store_true",
        help="Only show coverage statistics",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be classified without saving",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of transactions to classify",
    )
    parser.add_argument(
        "--company-id",
        default=None,
        help="Only classify transactions of this company",
    )

    args = parser.parse_args()

    run_classification(
        stats_only=args.stats_only,
        dry_run=args.dry_run,
        limit=args.limit,
        company_id=args.company_id,
    )


if __name__ == "__main__":
    main()

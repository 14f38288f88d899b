"""Rule-based classifier for bank-statement lines.

Bank descriptions are fixed-width codes that differ between banks. Each rule
holds a handful of anchored patterns; when several rules of the same table
match, the one with the highest priority wins and ties go to the rule
declared first.
"""

import logging
import re
from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

logger = logging.getLogger(__name__)


class TransactionType(str, Enum):
    """Symbolic category assigned to a bank-statement line."""

    INCOME_SALARY = "INCOME_SALARY"
    INCOME_BONUS = "INCOME_BONUS"
    INCOME_INTEREST = "INCOME_INTEREST"
    INCOME_SALES = "INCOME_SALES"
    INCOME_SERVICES = "INCOME_SERVICES"
    INCOME_TRANSFER = "INCOME_TRANSFER"
    INCOME_REFUND = "INCOME_REFUND"
    INCOME_ADJUSTMENT = "INCOME_ADJUSTMENT"
    INCOME_OTHER = "INCOME_OTHER"
    PAYROLL_SALARY = "PAYROLL_SALARY"
    PAYROLL_CTS = "PAYROLL_CTS"
    PAYROLL_AFP = "PAYROLL_AFP"
    TAX_PAYMENT = "TAX_PAYMENT"
    TAX_ITF = "TAX_ITF"
    TAX_DETRACTION = "TAX_DETRACTION"
    EXPENSE_UTILITIES = "EXPENSE_UTILITIES"
    EXPENSE_INSURANCE = "EXPENSE_INSURANCE"
    EXPENSE_COMMISSIONS = "EXPENSE_COMMISSIONS"
    TRANSFER_INBANK = "TRANSFER_INBANK"
    TRANSFER_EXTERNAL = "TRANSFER_EXTERNAL"
    WITHDRAWAL_CASH = "WITHDRAWAL_CASH"
    EXPENSE_PURCHASE = "EXPENSE_PURCHASE"
    ADJUSTMENT = "ADJUSTMENT"
    EXPENSE_OTHER = "EXPENSE_OTHER"


@dataclass(frozen=True)
class ClassificationRule:
    """Patterns mapping a description to one transaction type."""

    patterns: tuple[re.Pattern[str], ...]
    type: TransactionType
    priority: int = 0

    def matches(self, description: str) -> bool:
        """Return True if any pattern matches the description."""
        return any(pattern.search(description) for pattern in self.patterns)


def _rule(type_: TransactionType, priority: int, *patterns: str) -> ClassificationRule:
    return ClassificationRule(
        patterns=tuple(re.compile(p, re.IGNORECASE) for p in patterns),
        type=type_,
        priority=priority,
    )


INCOME_RULES: tuple[ClassificationRule, ...] = (
    _rule(
        TransactionType.INCOME_TRANSFER,
        1,
        r"^DE IZIPAY S\.A\.C",
        r"^DE [A-Z]",
        r"^TRANSF\.BCO\.",
        r"^ENTR\.EFEC\.",
    ),
    _rule(TransactionType.INCOME_REFUND, 2, r"^DEVOL\.", r"^REEMBOL"),
    _rule(TransactionType.INCOME_SALARY, 3, r"^HABER TLC"),
    _rule(TransactionType.INCOME_ADJUSTMENT, 4, r"^REGULARIZACION ITF"),
)

EXPENSE_RULES: tuple[ClassificationRule, ...] = (
    # Payroll
    _rule(TransactionType.PAYROLL_SALARY, 1, r"^HABER TLC", r"^PAGOS AFP"),
    _rule(TransactionType.PAYROLL_CTS, 2, r"^CTS TLC"),
    _rule(
        TransactionType.PAYROLL_AFP,
        3,
        r"^PAGOS AFP (INTEGRA|PRIMA|HABITAT|PROFUTUR)",
    ),
    # Taxes
    _rule(TransactionType.TAX_PAYMENT, 1, r"^PAGO IMPUES", r"^IMPUESTO SUNAT"),
    _rule(TransactionType.TAX_ITF, 2, r"^IMPUESTO ITF"),
    _rule(TransactionType.TAX_DETRACTION, 3, r"^DETR\.", r"^PAGO DETRAC"),
    # Services
    _rule(TransactionType.EXPENSE_UTILITIES, 1, r"^LUZ", r"^CLAR", r"^ENTE"),
    _rule(TransactionType.EXPENSE_INSURANCE, 2, r"^MAPF"),
    _rule(TransactionType.EXPENSE_COMMISSIONS, 3, r"^COMIS", r"^MANT", r"^PORTES"),
    # Transfers
    _rule(TransactionType.TRANSFER_INBANK, 1, r"^A \d{2,3} \d+"),  # "A 193 123456 0"
    _rule(
        TransactionType.TRANSFER_EXTERNAL, 2, r"^TRANFERENCIA CCE", r"^TRANSF\.BCO\."
    ),
    _rule(TransactionType.WITHDRAWAL_CASH, 3, r"^EFEC", r"^RETIRO"),
    # Purchases
    ClassificationRule(
        patterns=(re.compile(r"^VENU\$"), re.compile(r"^PAGO PROV", re.IGNORECASE)),
        type=TransactionType.EXPENSE_PURCHASE,
        priority=1,
    ),
    # Other
    _rule(TransactionType.ADJUSTMENT, 1, r"^AJUSTE", r"^REGULARIZACION"),
)


def _select_table(
    amount: float | Decimal | int,
) -> tuple[tuple[ClassificationRule, ...], TransactionType]:
    if amount >= 0:
        return INCOME_RULES, TransactionType.INCOME_OTHER
    return EXPENSE_RULES, TransactionType.EXPENSE_OTHER


def matching_rules(
    description: str | None, amount: float | Decimal | int
) -> list[ClassificationRule]:
    """Get every rule matching a description, in resolution order.

    Resolution order is priority descending, then declaration order. The
    first element (if any) is the rule classify() picks.

    Args:
        description: Bank-statement description.
        amount: Signed amount; zero and positive amounts use the income table.

    Returns:
        Matching rules, best first.
    """
    rules, _ = _select_table(amount)
    text = description or ""
    indexed = [(i, rule) for i, rule in enumerate(rules) if rule.matches(text)]
    indexed.sort(key=lambda item: (-item[1].priority, item[0]))
    return [rule for _, rule in indexed]


def classify(description: str | None, amount: float | Decimal | int) -> TransactionType:
    """Classify a bank-statement line.

    Args:
        description: Bank-statement description.
        amount: Signed amount.

    Returns:
        The type of the best matching rule, or the table default
        (INCOME_OTHER / EXPENSE_OTHER) when nothing matches.
    """
    rules = matching_rules(description, amount)
    if not rules:
        _, default_type = _select_table(amount)
        return default_type
    return rules[0].type


def classify_batch(
    rows: Iterable[tuple[Hashable, str | None, float | Decimal | int]],
) -> dict[Hashable, TransactionType]:
    """Classify many lines.

    Args:
        rows: (key, description, amount) tuples.

    Returns:
        Dictionary mapping each key to its TransactionType.
    """
    results: dict[Hashable, TransactionType] = {}
    for key, description, amount in rows:
        results[key] = classify(description, amount)
        logger.debug("Classified %r as %s", description, results[key].value)
    return results

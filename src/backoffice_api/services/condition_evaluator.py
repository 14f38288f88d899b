"""ConditionEvaluator for deciding whether a template condition matches a record."""

import logging
import re
from collections.abc import Callable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

import rule_engine  # type: ignore[import-untyped]

from backoffice_api.services.condition_tree import (
    FIELD_AMOUNT,
    ConditionGroup,
    ConditionLeaf,
    ConditionOperator,
    LogicalOperator,
    from_json,
)

logger = logging.getLogger(__name__)

NUMERIC_FIELDS = frozenset({FIELD_AMOUNT})

# Every leaf is evaluated against {"actual": <record value>, "expected": <leaf value>}
# so user input never becomes part of an expression.
_NUMERIC_EXPRESSIONS = {
    ConditionOperator.EQUALS.value: "actual == expected",
    ConditionOperator.NOT_EQUALS.value: "actual != expected",
    ConditionOperator.GREATER_THAN.value: "actual > expected",
    ConditionOperator.LESS_THAN.value: "actual < expected",
    ConditionOperator.GREATER_THAN_OR_EQUAL.value: "actual >= expected",
    ConditionOperator.LESS_THAN_OR_EQUAL.value: "actual <= expected",
}

_TEXT_EXPRESSIONS = {
    ConditionOperator.EQUALS.value: "actual.as_lower == expected.as_lower",
    ConditionOperator.NOT_EQUALS.value: "actual.as_lower != expected.as_lower",
    ConditionOperator.CONTAINS.value: "actual =~~ expected",
    ConditionOperator.NOT_CONTAINS.value: "actual !~~ expected",
    ConditionOperator.STARTS_WITH.value: "actual =~ expected",
    ConditionOperator.ENDS_WITH.value: "actual =~~ expected",
}

# Regex operators take an escaped, case-insensitive pattern built from the value.
_TEXT_PATTERNS: dict[str, Callable[[str], str]] = {
    ConditionOperator.CONTAINS.value: lambda value: "(?i)" + re.escape(value),
    ConditionOperator.NOT_CONTAINS.value: lambda value: "(?i)" + re.escape(value),
    ConditionOperator.STARTS_WITH.value: lambda value: "(?i)" + re.escape(value),
    ConditionOperator.ENDS_WITH.value: lambda value: "(?i)" + re.escape(value) + r"\Z",
}


def to_decimal(value: Any) -> Decimal | None:
    """Parse a value as a finite Decimal.

    Returns:
        The Decimal, or None when the value is missing or not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def is_blank(group: ConditionGroup) -> bool:
    """Whether a group has no complete leaf anywhere in its subtree."""
    return not any(leaf.is_complete for leaf in group.conditions) and all(
        is_blank(sub_group) for sub_group in group.groups
    )


class ConditionEvaluator:
    """Evaluates condition trees against a flat record.

    Uses the rule-engine library: each operator maps to a precompiled rule.
    Text operators compare case-insensitively. Ordering operators, and
    equality on numeric fields, compare numbers. A leaf that cannot be
    evaluated (missing field, unparseable number, unknown operator, engine
    error) is False; evaluation never raises.
    """

    def __init__(self, numeric_fields: frozenset[str] = NUMERIC_FIELDS) -> None:
        """Initialize the evaluator and compile the operator rules.

        Args:
            numeric_fields: Fields whose equality tests compare numerically.
        """
        self._numeric_fields = numeric_fields
        self._numeric_rules = self._compile(_NUMERIC_EXPRESSIONS, rule_engine.DataType.FLOAT)
        self._text_rules = self._compile(_TEXT_EXPRESSIONS, rule_engine.DataType.STRING)

    @staticmethod
    def _compile(
        expressions: dict[str, str], data_type: Any
    ) -> dict[str, rule_engine.Rule]:
        context = rule_engine.Context(
            type_resolver=rule_engine.type_resolver_from_dict(
                {"actual": data_type, "expected": data_type}
            )
        )
        return {
            operator: rule_engine.Rule(expression, context=context)
            for operator, expression in expressions.items()
        }

    def matches(
        self, condition: Mapping[str, Any] | None, record: Mapping[str, Any]
    ) -> bool:
        """Check a condition in wire format against a record.

        Args:
            condition: Condition JSON as stored on the template.
            record: Field name to value mapping (amount, supplier, ...).

        Returns:
            True if the condition tree matches.
        """
        if not condition:
            return True
        return self.evaluate_group(from_json(condition)[0], record)

    def evaluate_group(self, group: ConditionGroup, record: Mapping[str, Any]) -> bool:
        """Evaluate a group: complete leaves first, then sub-groups.

        Blank sub-groups (no complete leaf in their subtree) are ignored. A
        group left with nothing to evaluate matches.
        """
        results = (
            self.evaluate_leaf(leaf, record)
            for leaf in group.conditions
            if leaf.is_complete
        )
        sub_results = (
            self.evaluate_group(g, record) for g in group.groups if not is_blank(g)
        )
        children = [*results, *sub_results]

        if not children:
            return True
        if LogicalOperator(group.operator) == LogicalOperator.OR:
            return any(children)
        return all(children)

    def evaluate_leaf(self, leaf: ConditionLeaf, record: Mapping[str, Any]) -> bool:
        """Evaluate a single leaf condition against a record."""
        actual = record.get(leaf.field)
        if actual is None:
            return False

        numeric_rule = self._numeric_rules.get(leaf.operator)
        text_rule = self._text_rules.get(leaf.operator)

        if numeric_rule is not None and (
            text_rule is None or leaf.field in self._numeric_fields
        ):
            actual_number = to_decimal(actual)
            expected_number = to_decimal(leaf.value)
            if actual_number is None or expected_number is None:
                logger.debug(
                    "Non-numeric comparison for field '%s' (%r %s %r)",
                    leaf.field,
                    actual,
                    leaf.operator,
                    leaf.value,
                )
                return False
            return self._run(
                numeric_rule, {"actual": actual_number, "expected": expected_number}
            )

        if text_rule is not None:
            to_pattern = _TEXT_PATTERNS.get(leaf.operator)
            expected = to_pattern(leaf.value) if to_pattern else leaf.value
            return self._run(text_rule, {"actual": str(actual), "expected": expected})

        logger.warning("Unknown condition operator '%s'", leaf.operator)
        return False

    def _run(self, rule: rule_engine.Rule, values: dict[str, Any]) -> bool:
        try:
            return bool(rule.matches(values))
        except rule_engine.EngineError as e:
            logger.warning("Condition evaluation failed for %r: %s", rule.text, e)
            return False

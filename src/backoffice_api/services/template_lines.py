"""Editing operations for accounting entry template lines.

Lines are kept in execution order; execution_order is 1-based and
contiguous after every operation. All functions return a new list.
"""

import copy
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from backoffice_api.models.accounting_entry_template import (
    ApplicationType,
    CalculationBase,
    MovementType,
)

LINE_ATTRIBUTES = (
    "account_code",
    "movement_type",
    "application_type",
    "calculation_base",
    "value",
    "execution_order",
)


@dataclass
class TemplateLineDraft:
    """A template line as edited before saving."""

    account_code: str = ""
    movement_type: MovementType = MovementType.DEBIT
    application_type: ApplicationType = ApplicationType.FIXED_AMOUNT
    calculation_base: CalculationBase | None = None
    value: Decimal | float | int | str | None = Decimal("0")
    execution_order: int = 1


def requires_calculation_base(application_type: ApplicationType | str) -> bool:
    """Whether a line of this application type needs a calculation base."""
    return ApplicationType(application_type) not in (
        ApplicationType.FIXED_AMOUNT,
        ApplicationType.TRANSACTION_AMOUNT,
    )


def _renumber(lines: list[TemplateLineDraft]) -> list[TemplateLineDraft]:
    for position, line in enumerate(lines, start=1):
        line.execution_order = position
    return lines


def add_line(lines: list[TemplateLineDraft]) -> list[TemplateLineDraft]:
    """Append a zero-valued DEBIT / FIXED_AMOUNT line."""
    new_lines = copy.deepcopy(lines)
    new_lines.append(TemplateLineDraft(execution_order=len(new_lines) + 1))
    return new_lines


def remove_line(lines: list[TemplateLineDraft], index: int) -> list[TemplateLineDraft]:
    """Remove a line and renumber the rest."""
    new_lines = copy.deepcopy(lines)
    del new_lines[index]
    return _renumber(new_lines)


def update_line(
    lines: list[TemplateLineDraft], index: int, attribute: str, value: Any
) -> list[TemplateLineDraft]:
    """Replace one attribute of one line.

    Switching a line to FIXED_AMOUNT or TRANSACTION_AMOUNT clears its
    calculation base.

    Raises:
        ValueError: If attribute is not a line attribute.
    """
    if attribute not in LINE_ATTRIBUTES:
        raise ValueError(f"Unknown line attribute '{attribute}'")
    new_lines = copy.deepcopy(lines)
    line = new_lines[index]
    setattr(line, attribute, value)
    if attribute == "application_type" and not requires_calculation_base(value):
        line.calculation_base = None
    return new_lines


def move_line(
    lines: list[TemplateLineDraft], index: int, direction: str
) -> list[TemplateLineDraft]:
    """Swap a line with its neighbour ("up" or "down") and renumber.

    Moving the first line up or the last line down returns an unchanged copy.

    Raises:
        ValueError: If direction is not "up" or "down".
    """
    if direction not in ("up", "down"):
        raise ValueError(f"Unknown direction '{direction}'")
    new_lines = copy.deepcopy(lines)
    target = index - 1 if direction == "up" else index + 1
    if target < 0 or target >= len(new_lines):
        return new_lines
    new_lines[index], new_lines[target] = new_lines[target], new_lines[index]
    return _renumber(new_lines)

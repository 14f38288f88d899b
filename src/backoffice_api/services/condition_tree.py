"""Condition tree model for accounting entry templates.

A template's condition is a tree of AND/OR groups. Each group holds leaf
conditions (field, operator, value) and nested sub-groups. The editor keeps
a list with exactly one top-level group; the JSON wire format persisted on the
template is a single group object:

    {"operator": "AND",
     "conditions": [{"field": ..., "operator": ..., "value": ...}],
     "groups": [...]}          # only present when non-empty

All editing functions are pure: they return a new list of groups and never
mutate their input.
"""

import copy
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class LogicalOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class ConditionOperator(str, Enum):
    """Comparison applied by a leaf condition."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"


# Fields offered by the editor. Unknown field names are still carried through.
FIELD_AMOUNT = "amount"
FIELD_SUPPLIER = "supplier"
FIELD_DESCRIPTION = "description"
KNOWN_FIELDS = (FIELD_AMOUNT, FIELD_SUPPLIER, FIELD_DESCRIPTION)

LEAF_ATTRIBUTES = ("field", "operator", "value")


@dataclass
class ConditionLeaf:
    """A single field/operator/value test."""

    field: str = ""
    operator: str = ConditionOperator.EQUALS.value
    value: str = ""

    @property
    def is_complete(self) -> bool:
        """Whether the leaf has both a field and a value."""
        return bool(self.field) and bool(self.value)

    def to_json(self) -> dict[str, str]:
        return {"field": self.field, "operator": self.operator, "value": self.value}


@dataclass
class ConditionGroup:
    """AND/OR combination of leaf conditions and nested groups."""

    operator: LogicalOperator = LogicalOperator.AND
    conditions: list[ConditionLeaf] = field(default_factory=lambda: [ConditionLeaf()])
    groups: list["ConditionGroup"] = field(default_factory=list)


def default_groups() -> list[ConditionGroup]:
    """Build the tree of a new template: one AND group with one empty leaf."""
    return [ConditionGroup()]


def to_json(groups: list[ConditionGroup]) -> dict[str, Any]:
    """Serialize the editor tree to the condition wire format.

    Only the single top-level group is serialized. Incomplete leaves (empty
    field or value) are dropped; the "groups" key is emitted only when the
    group has sub-groups.

    Args:
        groups: Editor tree; expected to hold exactly one top-level group.

    Returns:
        The JSON-ready dict, or {} for an empty list.
    """
    if not groups:
        return {}
    if len(groups) > 1:
        logger.warning(
            "Condition tree has %d top-level groups; only the first is serialized",
            len(groups),
        )
    return _group_to_json(groups[0])


def _group_to_json(group: ConditionGroup) -> dict[str, Any]:
    result: dict[str, Any] = {
        "operator": LogicalOperator(group.operator).value,
        "conditions": [c.to_json() for c in group.conditions if c.is_complete],
    }
    if group.groups:
        result["groups"] = [_group_to_json(g) for g in group.groups]
    return result


def from_json(data: Any) -> list[ConditionGroup]:
    """Rebuild the editor tree from the condition wire format.

    Missing or malformed parts fall back to defaults: operator AND, a single
    empty leaf when "conditions" is absent, "" for missing leaf field/value
    and "equals" for a missing leaf operator.

    Args:
        data: Decoded JSON (normally a dict).

    Returns:
        A list holding exactly one ConditionGroup.
    """
    return [_group_from_json(data)]


def _group_from_json(data: Any) -> ConditionGroup:
    if not isinstance(data, dict):
        return ConditionGroup()

    operator = data.get("operator")
    try:
        logical = LogicalOperator(operator) if operator else LogicalOperator.AND
    except ValueError:
        logger.warning("Unknown group operator %r, using AND", operator)
        logical = LogicalOperator.AND

    raw_conditions = data.get("conditions")
    if isinstance(raw_conditions, list):
        conditions = [_leaf_from_json(c) for c in raw_conditions if isinstance(c, dict)]
    else:
        conditions = [ConditionLeaf()]

    raw_groups = data.get("groups")
    groups = (
        [_group_from_json(g) for g in raw_groups] if isinstance(raw_groups, list) else []
    )
    return ConditionGroup(operator=logical, conditions=conditions, groups=groups)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _leaf_from_json(data: dict[str, Any]) -> ConditionLeaf:
    return ConditionLeaf(
        field=_text(data.get("field")),
        operator=_text(data.get("operator")) or ConditionOperator.EQUALS.value,
        value=_text(data.get("value")),
    )


def add_condition(groups: list[ConditionGroup], group_index: int) -> list[ConditionGroup]:
    """Append an empty leaf to a group."""
    new_groups = copy.deepcopy(groups)
    new_groups[group_index].conditions.append(ConditionLeaf())
    return new_groups


def remove_condition(
    groups: list[ConditionGroup], group_index: int, condition_index: int
) -> list[ConditionGroup]:
    """Remove a leaf; a group left without leaves gets one empty leaf back."""
    new_groups = copy.deepcopy(groups)
    conditions = new_groups[group_index].conditions
    del conditions[condition_index]
    if not conditions:
        conditions.append(ConditionLeaf())
    return new_groups


def update_condition(
    groups: list[ConditionGroup],
    group_index: int,
    condition_index: int,
    attribute: str,
    value: str,
) -> list[ConditionGroup]:
    """Replace one attribute (field, operator or value) of one leaf.

    Raises:
        ValueError: If attribute is not a leaf attribute.
    """
    if attribute not in LEAF_ATTRIBUTES:
        raise ValueError(f"Unknown condition attribute '{attribute}'")
    new_groups = copy.deepcopy(groups)
    setattr(new_groups[group_index].conditions[condition_index], attribute, value)
    return new_groups


def update_group_operator(
    groups: list[ConditionGroup], group_index: int, operator: LogicalOperator | str
) -> list[ConditionGroup]:
    """Set a group's AND/OR combinator."""
    new_groups = copy.deepcopy(groups)
    new_groups[group_index].operator = LogicalOperator(operator)
    return new_groups


def iter_leaves(groups: list[ConditionGroup]) -> Iterator[ConditionLeaf]:
    """Yield every leaf of the tree, depth first."""
    for group in groups:
        yield from group.conditions
        yield from iter_leaves(group.groups)


def needs_suppliers(groups: list[ConditionGroup]) -> bool:
    """Whether any leaf tests the supplier field.

    The supplier list used to fill supplier-valued leaves is only fetched when
    this is True.
    """
    return any(leaf.field == FIELD_SUPPLIER for leaf in iter_leaves(groups))


def count_complete_conditions(group: ConditionGroup) -> int:
    """Number of leaves in the group (not its sub-groups) with field and value."""
    return sum(1 for c in group.conditions if c.is_complete)

"""Business logic services."""

from backoffice_api.services.condition_evaluator import ConditionEvaluator
from backoffice_api.services.condition_tree import (
    ConditionGroup,
    ConditionLeaf,
    ConditionOperator,
    LogicalOperator,
)
from backoffice_api.services.template_application_service import (
    GeneratedLine,
    TemplateApplication,
    TemplateApplicationService,
)
from backoffice_api.services.template_lines import TemplateLineDraft
from backoffice_api.services.template_validation import (
    LineTotals,
    TemplateForm,
    can_submit,
    compute_line_totals,
    validate_template_form,
)
from backoffice_api.services.transaction_classifier import (
    ClassificationRule,
    TransactionType,
    classify,
    classify_batch,
)

__all__ = [
    # Condition tree
    "ConditionEvaluator",
    "ConditionGroup",
    "ConditionLeaf",
    "ConditionOperator",
    "LogicalOperator",
    # Template application
    "GeneratedLine",
    "TemplateApplication",
    "TemplateApplicationService",
    # Template lines and validation
    "LineTotals",
    "TemplateForm",
    "TemplateLineDraft",
    "can_submit",
    "compute_line_totals",
    "validate_template_form",
    # Transaction classification
    "ClassificationRule",
    "TransactionType",
    "classify",
    "classify_batch",
]

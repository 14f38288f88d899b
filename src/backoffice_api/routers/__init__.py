"""API routers."""

from backoffice_api.routers.accounting_templates import (
    router as accounting_templates_router,
)
from backoffice_api.routers.classification import router as classification_router

__all__ = ["accounting_templates_router", "classification_router"]

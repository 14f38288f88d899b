"""Integration tests for accounting templates router."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from backoffice_api.routers.accounting_templates import _raise_conflict

BASE = "/api/v1/accounting-templates"


@pytest.fixture
def payload() -> dict:
    """A valid purchase template."""
    return {
        "template_number": " 001 ",
        "name": "Compras gravadas",
        "transaction_type": "EXPENSE_PURCHASE",
        "filter": "INVOICES",
        "currency": "PEN",
        "condition": {
            "operator": "AND",
            "conditions": [
                {"field": "supplier", "operator": "equals", "value": "ACME SAC"}
            ],
        },
        "lines": [
            {
                "account_code": "6011",
                "movement_type": "DEBIT",
                "application_type": "FIXED_AMOUNT",
                "value": "100",
                "execution_order": 1,
            },
            {
                "account_code": "4212",
                "movement_type": "CREDIT",
                "application_type": "FIXED_AMOUNT",
                "value": "100",
                "execution_order": 2,
            },
        ],
    }


@pytest.fixture
def created(client_with_db: TestClient, payload: dict) -> dict:
    """A template stored for company C1."""
    response = client_with_db.post(f"{BASE}/company/C1", json=payload)
    assert response.status_code == 201
    return response.json()


class TestCreateTemplate:
    """Tests for POST /company/{company_id}."""

    def test_create(self, created: dict, payload: dict) -> None:
        """Test text fields are trimmed and the condition is stored as sent."""
        assert created["id"] is not None
        assert created["company_id"] == "C1"
        assert created["template_number"] == "001"
        assert created["filter"] == "INVOICES"
        assert created["condition"] == payload["condition"]
        assert [line["execution_order"] for line in created["lines"]] == [1, 2]
        assert Decimal(created["lines"][0]["value"]) == Decimal("100")

    def test_create_blank_document_is_null(
        self, client_with_db: TestClient, payload: dict
    ) -> None:
        payload["document"] = ""
        payload["description"] = " Compras con IGV "

        data = client_with_db.post(f"{BASE}/company/C1", json=payload).json()

        assert data["document"] is None
        assert data["description"] == "Compras con IGV"

    def test_create_invalid_form(self, client_with_db: TestClient) -> None:
        """Test an incomplete form is rejected with every error."""
        response = client_with_db.post(f"{BASE}/company/C1", json={})

        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == [
            "Template number is required",
            "Name is required",
            "Transaction type is required",
            "Add at least one entry line",
        ]

    def test_create_unbalanced(self, client_with_db: TestClient, payload: dict) -> None:
        payload["lines"][1]["value"] = "99.99"

        response = client_with_db.post(f"{BASE}/company/C1", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == [
            "Entry must be balanced (debit = credit)"
        ]

    def test_create_duplicate_number(
        self, client_with_db: TestClient, created: dict, payload: dict
    ) -> None:
        """Test the number must be unique within the company."""
        response = client_with_db.post(f"{BASE}/company/C1", json=payload)

        assert response.status_code == 409

        other = client_with_db.post(f"{BASE}/company/C2", json=payload)
        assert other.status_code == 201


class TestReadTemplates:
    """Tests for GET endpoints."""

    def test_get(self, client_with_db: TestClient, created: dict) -> None:
        response = client_with_db.get(f"{BASE}/{created['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "Compras gravadas"

    def test_get_not_found(self, client_with_db: TestClient) -> None:
        response = client_with_db.get(f"{BASE}/999")

        assert response.status_code == 404

    def test_list(self, client_with_db: TestClient, created: dict, payload: dict) -> None:
        payload["template_number"] = "000"
        payload["is_active"] = False
        client_with_db.post(f"{BASE}/company/C1", json=payload)

        data = client_with_db.get(f"{BASE}/company/C1").json()
        assert data["total"] == 2
        assert [t["template_number"] for t in data["templates"]] == ["000", "001"]

        active = client_with_db.get(f"{BASE}/company/C1", params={"active_only": True})
        assert [t["template_number"] for t in active.json()["templates"]] == ["001"]

    def test_list_other_company_is_empty(
        self, client_with_db: TestClient, created: dict
    ) -> None:
        assert client_with_db.get(f"{BASE}/company/C9").json() == {
            "templates": [],
            "total": 0,
        }


class TestValidateTemplate:
    """Tests for POST /validate."""

    def test_valid(self, client_with_db: TestClient, payload: dict) -> None:
        data = client_with_db.post(f"{BASE}/validate", json=payload).json()

        assert Decimal(data["debit"]) == Decimal("100")
        assert Decimal(data["credit"]) == Decimal("100")
        assert data["balanced"] is True
        assert data["errors"] == []
        assert data["can_submit"] is True

    def test_sub_cent_difference(self, client_with_db: TestClient, payload: dict) -> None:
        payload["lines"][1]["value"] = "100.005"

        data = client_with_db.post(f"{BASE}/validate", json=payload).json()

        assert data["balanced"] is True

    def test_invalid(self, client_with_db: TestClient, payload: dict) -> None:
        payload["lines"][0]["account_code"] = ""
        payload["lines"][0]["value"] = "50"

        data = client_with_db.post(f"{BASE}/validate", json=payload).json()

        assert data["balanced"] is False
        assert data["can_submit"] is False
        assert data["errors"] == [
            "Every line must have an account code",
            "Entry must be balanced (debit = credit)",
        ]


class TestUpdateTemplate:
    """Tests for PATCH /{template_id}."""

    def test_update_name(self, client_with_db: TestClient, created: dict) -> None:
        """Test a partial update keeps the lines."""
        response = client_with_db.patch(
            f"{BASE}/{created['id']}", json={"name": "Compras nacionales"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Compras nacionales"
        assert data["currency"] == "PEN"
        assert len(data["lines"]) == 2

    def test_update_lines(self, client_with_db: TestClient, created: dict) -> None:
        lines = [
            {"account_code": "6391", "movement_type": "DEBIT", "value": "10"},
            {"account_code": "1041", "movement_type": "CREDIT", "value": "10"},
            {"account_code": "9999", "movement_type": "DEBIT", "value": "0"},
        ]

        response = client_with_db.patch(f"{BASE}/{created['id']}", json={"lines": lines})

        assert response.status_code == 200
        assert [line["account_code"] for line in response.json()["lines"]] == [
            "6391",
            "1041",
            "9999",
        ]

    def test_update_merged_form_is_validated(
        self, client_with_db: TestClient, created: dict
    ) -> None:
        """Test an update that unbalances the stored lines is rejected."""
        response = client_with_db.patch(
            f"{BASE}/{created['id']}",
            json={
                "lines": [{"account_code": "6011", "movement_type": "DEBIT", "value": "1"}]
            },
        )

        assert response.status_code == 422

    def test_update_blank_name_rejected(
        self, client_with_db: TestClient, created: dict
    ) -> None:
        response = client_with_db.patch(f"{BASE}/{created['id']}", json={"name": " "})

        assert response.status_code == 422
        assert response.json()["detail"]["errors"] == ["Name is required"]

    def test_update_to_existing_number(
        self, client_with_db: TestClient, created: dict, payload: dict
    ) -> None:
        """Test renumbering onto another template's number is a conflict."""
        payload["template_number"] = "002"
        second = client_with_db.post(f"{BASE}/company/C1", json=payload).json()

        response = client_with_db.patch(
            f"{BASE}/{second['id']}", json={"template_number": "001"}
        )

        assert response.status_code == 409
        assert client_with_db.get(f"{BASE}/{second['id']}").json()["template_number"] == "002"

    def test_update_normalizes_text_fields(
        self, client_with_db: TestClient, created: dict
    ) -> None:
        """Test update trims text and stores blank optional fields as null."""
        client_with_db.patch(
            f"{BASE}/{created['id']}",
            json={"document": "FACTURA", "description": "Compras locales"},
        )

        response = client_with_db.patch(
            f"{BASE}/{created['id']}",
            json={
                "template_number": " 003 ",
                "name": "  Compras nacionales ",
                "transaction_type": " EXPENSE_PURCHASE",
                "document": "",
                "description": "   ",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["template_number"] == "003"
        assert data["name"] == "Compras nacionales"
        assert data["transaction_type"] == "EXPENSE_PURCHASE"
        assert data["document"] is None
        assert data["description"] is None

    def test_update_not_found(self, client_with_db: TestClient) -> None:
        response = client_with_db.patch(f"{BASE}/404", json={"name": "X"})

        assert response.status_code == 404


class TestDeleteTemplate:
    """Tests for DELETE /{template_id}."""

    def test_delete(self, client_with_db: TestClient, created: dict) -> None:
        response = client_with_db.delete(f"{BASE}/{created['id']}")

        assert response.status_code == 204
        assert client_with_db.get(f"{BASE}/{created['id']}").status_code == 404

    def test_delete_not_found(self, client_with_db: TestClient) -> None:
        assert client_with_db.delete(f"{BASE}/1").status_code == 404


class TestApplyTemplate:
    """Tests for POST /{template_id}/apply."""

    def test_apply_matching_record(self, client_with_db: TestClient, created: dict) -> None:
        response = client_with_db.post(
            f"{BASE}/{created['id']}/apply",
            json={
                "record": {
                    "document_kind": "INVOICES",
                    "currency": "PEN",
                    "supplier": "Acme SAC",
                    "amount": -100,
                }
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["matched"] is True
        assert [
            (line["account_code"], line["movement_type"], Decimal(line["amount"]))
            for line in data["lines"]
        ] == [
            ("6011", "DEBIT", Decimal("100.00")),
            ("4212", "CREDIT", Decimal("100.00")),
        ]

    @pytest.mark.parametrize(
        "record",
        [
            {"document_kind": "PAYROLL", "currency": "PEN", "supplier": "ACME SAC"},
            {"document_kind": "INVOICES", "currency": "USD", "supplier": "ACME SAC"},
            {"document_kind": "INVOICES", "currency": "PEN", "supplier": "OTRO"},
            {"document_kind": "INVOICES", "currency": "PEN"},
        ],
    )
    def test_apply_non_matching_record(
        self, client_with_db: TestClient, created: dict, record: dict
    ) -> None:
        data = client_with_db.post(
            f"{BASE}/{created['id']}/apply", json={"record": record}
        ).json()

        assert data == {"template_id": created["id"], "matched": False, "lines": []}

    def test_apply_not_found(self, client_with_db: TestClient) -> None:
        response = client_with_db.post(f"{BASE}/5/apply", json={"record": {}})

        assert response.status_code == 404


class TestConflictDetail:
    """Tests for mapping database integrity errors to 409 responses."""

    def test_duplicate_number_detail(
        self, client_with_db: TestClient, created: dict, payload: dict
    ) -> None:
        response = client_with_db.post(f"{BASE}/company/C1", json=payload)

        assert response.json()["detail"] == "Template number already exists for this company"

    @pytest.mark.parametrize(
        "message",
        [
            "UNIQUE constraint failed: accounting_entry_templates.company_id, "
            "accounting_entry_templates.template_number",
            "Cannot insert duplicate key row in object 'accounting_entry_templates' "
            "with unique index 'UQ_accounting_entry_templates_number'.",
        ],
    )
    def test_unique_number_violation(self, message: str) -> None:
        """Test unique-index messages from SQLite and SQL Server are recognised."""
        db = MagicMock()

        with pytest.raises(HTTPException) as exc_info:
            _raise_conflict(db, IntegrityError("INSERT", {}, Exception(message)))

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "Template number already exists for this company"
        db.rollback.assert_called_once()

    def test_other_integrity_error_is_generic(self) -> None:
        """Test unrelated constraint failures do not blame the template number."""
        db = MagicMock()
        error = IntegrityError(
            "INSERT",
            {},
            Exception("FOREIGN KEY constraint failed"),
        )

        with pytest.raises(HTTPException) as exc_info:
            _raise_conflict(db, error)

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "Template conflicts with existing data"
        db.rollback.assert_called_once()

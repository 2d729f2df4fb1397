from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.models.domain import Invoice
from tests.utils.test_utils import (
    assert_response_error,
    assert_response_success,
    create_test_customer_request,
)


class TestCustomerEndpoints:
    """Test cases for the customer endpoints."""

    def test_create_customer(self, client: TestClient):
        response = client.post("/api/customers/", json=create_test_customer_request())

        assert_response_success(response, 201)
        data = response.json()
        assert data["name"] == "Ravi Kumar"
        assert data["email"] == "ravi@example.com"
        assert data["whatsapp_number"] == "9876543210"
        assert "id" in data
        assert "created_at" in data

    def test_create_customer_without_email(self, client: TestClient):
        response = client.post("/api/customers/", json=create_test_customer_request(email=None))

        assert_response_success(response, 201)
        assert response.json()["email"] is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"whatsapp_number": "12345"},
            {"email": "not-an-email"},
        ],
    )
    def test_create_customer_validation(self, client: TestClient, overrides):
        request = create_test_customer_request()
        request.update(overrides)

        response = client.post("/api/customers/", json=request)

        assert_response_error(response, 422)

    def test_create_customer_missing_fields(self, client: TestClient):
        response = client.post("/api/customers/", json={"name": "No Number"})

        assert_response_error(response, 422)

    def test_list_customers(self, client: TestClient, customer, db):
        db.add(Invoice(invoice_number="INV-1700000000000-LISTCUST1", customer_id=customer.id, total_amount=5.0))
        db.commit()

        response = client.get("/api/customers/")

        assert_response_success(response)
        data = response.json()
        assert len(data) == 1
        assert data[0]["name"] == "Asha Verma"
        assert data[0]["invoice_count"] == 1

    def test_get_customer_with_invoices(self, client: TestClient, customer, db):
        db.add(Invoice(invoice_number="INV-1700000000000-GETCUST01", customer_id=customer.id, total_amount=75.5))
        db.commit()

        response = client.get(f"/api/customers/{customer.id}")

        assert_response_success(response)
        data = response.json()
        assert data["id"] == str(customer.id)
        assert [i["invoice_number"] for i in data["invoices"]] == ["INV-1700000000000-GETCUST01"]
        assert data["invoices"][0]["total_amount"] == 75.5

    def test_get_customer_not_found(self, client: TestClient):
        response = client.get(f"/api/customers/{uuid4()}")

        assert_response_error(response, 404)

    def test_get_customer_invalid_id(self, client: TestClient):
        response = client.get("/api/customers/not-a-uuid")

        assert_response_error(response, 422)

    def test_update_customer(self, client: TestClient, customer):
        response = client.put(f"/api/customers/{customer.id}", json={"phone": "+91 90000 00000"})

        assert_response_success(response)
        data = response.json()
        assert data["phone"] == "+91 90000 00000"
        assert data["name"] == "Asha Verma"

    def test_update_customer_not_found(self, client: TestClient):
        response = client.put(f"/api/customers/{uuid4()}", json={"name": "Ghost"})

        assert_response_error(response, 404)

    def test_update_customer_validation(self, client: TestClient, customer):
        response = client.put(f"/api/customers/{customer.id}", json={"whatsapp_number": "123"})

        assert_response_error(response, 422)

    @pytest.mark.parametrize("field", ["name", "whatsapp_number"])
    def test_update_customer_rejects_null_required_field(self, client: TestClient, customer, field):
        response = client.put(f"/api/customers/{customer.id}", json={field: None})

        assert_response_error(response, 422)
        data = client.get(f"/api/customers/{customer.id}").json()
        assert data["name"] == "Asha Verma"
        assert data["whatsapp_number"] == "9876543210"

    def test_update_customer_allows_clearing_optional_field(self, client: TestClient, customer):
        response = client.put(f"/api/customers/{customer.id}", json={"phone": None})

        assert_response_success(response)
        assert response.json()["phone"] is None

    def test_delete_customer(self, client: TestClient, customer):
        response = client.delete(f"/api/customers/{customer.id}")

        assert response.status_code == 204
        assert client.get(f"/api/customers/{customer.id}").status_code == 404

    def test_delete_customer_not_found(self, client: TestClient):
        response = client.delete(f"/api/customers/{uuid4()}")

        assert_response_error(response, 404)

    def test_delete_customer_with_invoices(self, client: TestClient, customer, db):
        db.add(Invoice(invoice_number="INV-1700000000000-DELCUST01", customer_id=customer.id, total_amount=1.0))
        db.commit()

        response = client.delete(f"/api/customers/{customer.id}")

        assert_response_error(response, 409)

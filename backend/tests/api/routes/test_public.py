from fastapi.testclient import TestClient

from tests.utils.test_utils import assert_response_error, create_test_invoice_request


class TestPublicInvoiceLink:
    """Test cases for GET /api/public/invoices/{token}."""

    def test_redirects_to_pdf(self, client: TestClient, customer):
        invoice = client.post(
            "/api/invoices/", json=create_test_invoice_request(str(customer.id))
        ).json()

        response = client.get(
            f"/api/public/invoices/{invoice['public_token']}", follow_redirects=False
        )

        assert response.status_code == 302
        assert response.headers["location"] == invoice["pdf_url"]

    def test_unknown_token(self, client: TestClient):
        response = client.get("/api/public/invoices/" + "f" * 64, follow_redirects=False)

        assert_response_error(response, 404)

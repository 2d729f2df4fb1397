import json
from typing import Any, Dict, List, Optional, Tuple

import httpx


def create_test_customer_request(
    name: str = "Ravi Kumar",
    whatsapp_number: str = "9876543210",
    email: Optional[str] = "ravi@example.com",
    phone: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a test customer request."""
    request = {
        "name": name,
        "whatsapp_number": whatsapp_number,
    }
    if email is not None:
        request["email"] = email
    if phone is not None:
        request["phone"] = phone
    return request


def create_test_invoice_request(customer_id: str, items: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Create a test invoice request."""
    if items is None:
        items = [
            create_test_item("Website design", 1, 15000.0),
            create_test_item("Hosting (monthly)", 3, 499.5),
        ]
    return {
        "customer_id": customer_id,
        "items": items
    }


def create_test_item(description: str, quantity: int, price: float) -> Dict[str, Any]:
    """Create a test invoice line item."""
    return {
        "description": description,
        "quantity": quantity,
        "price": price
    }


def assert_response_success(response, expected_status: int = 200):
    """Assert that a response is successful."""
    assert response.status_code == expected_status
    assert response.json() is not None


def assert_response_error(response, expected_status: int = 400):
    """Assert that a response is an error."""
    assert response.status_code == expected_status
    assert "detail" in response.json()


class WATIProviderStub:
    """
    Handler for httpx.MockTransport standing in for the WATI API.

    Requests are recorded; responses are scripted per path fragment and
    built fresh for every request. Unscripted paths answer 200 with a
    message id.
    """

    DEFAULT_MESSAGE_ID = "wamid-test-001"

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[Tuple[str, int, Dict[str, Any]]] = []
        self._errors: Dict[str, Exception] = {}

    def respond(self, path_fragment: str, status_code: int, **kwargs) -> None:
        """Answer requests whose path contains `path_fragment`."""
        self._responses.insert(0, (path_fragment, status_code, kwargs))

    def fail(self, path_fragment: str, error: Exception) -> None:
        """Raise `error` for requests whose path contains `path_fragment`."""
        self._errors[path_fragment] = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        for fragment, error in self._errors.items():
            if fragment in request.url.path:
                raise error

        for fragment, status_code, kwargs in self._responses:
            if fragment in request.url.path:
                return httpx.Response(status_code, **kwargs)

        return httpx.Response(200, json={"result": True, "messageId": self.DEFAULT_MESSAGE_ID})

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)

from collections.abc import Generator

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.api.deps import get_db, get_pdf_service, get_wati_service
from app.core.config import Settings, get_settings
from app.main import app
from app.models.domain import Customer
from app.services import PDFService, WATIService
from tests.utils.test_utils import WATIProviderStub


@pytest.fixture(scope="function")
def engine():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    with Session(engine) as session:
        yield session


@pytest.fixture(scope="function")
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the developer's .env."""
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        BASE_URL="http://testserver",
        FRONTEND_URL=None,
        PDF_STORAGE_DIR=str(tmp_path / "invoices"),
        CURRENCY_SYMBOL="₹",
        PUBLIC_LINKS_ENABLED=True,
        NOTIFICATIONS_ENABLED=True,
        WATI_API_ENDPOINT="https://wati.test/api/v1",
        WATI_API_TOKEN="test-token",
        WATI_SENDER_NUMBER=None,
        WATI_CHANNEL_PHONE_NUMBER=None,
        WATI_INVOICE_TEMPLATE_NAME=None,
        WATI_TEST_PDF_URL=None,
    )


@pytest.fixture(scope="function")
def provider() -> WATIProviderStub:
    """Recorded, scriptable stand-in for the WATI HTTP API."""
    return WATIProviderStub()


@pytest.fixture(scope="function")
def wati_service(test_settings, provider) -> Generator[WATIService, None, None]:
    service = WATIService(test_settings, transport=httpx.MockTransport(provider))
    yield service
    service.close()


@pytest.fixture(scope="function")
def pdf_service(test_settings) -> PDFService:
    return PDFService(
        test_settings.PDF_STORAGE_DIR,
        currency_symbol=test_settings.CURRENCY_SYMBOL,
    )


@pytest.fixture(scope="function")
def customer(db) -> Customer:
    customer = Customer(
        name="Asha Verma",
        email="asha@example.com",
        phone="+91 98765 43210",
        whatsapp_number="9876543210",
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture(scope="function")
def client(engine, test_settings, pdf_service, wati_service) -> Generator[TestClient, None, None]:
    """Create a test client wired to the test database and provider stub."""

    def get_test_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_pdf_service] = lambda: pdf_service
    app.dependency_overrides[get_wati_service] = lambda: wati_service
    app.dependency_overrides[get_settings] = lambda: test_settings

    # No context manager: the lifespan would open the configured database
    yield TestClient(app)

    app.dependency_overrides.clear()

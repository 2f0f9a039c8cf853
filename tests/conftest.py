"""
Shared fixtures for the greet service tests.
"""
import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from greet_service.factory import create_app

VALID_TOKEN = "valid-token"


def stub_token_verifier(token):
    """Stands in for Google token verification."""
    if token != VALID_TOKEN:
        raise ValueError("Token used too late or wrong signature")
    return {"sub": "1234567890", "email": "joe@example.com", "name": "Joe"}


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def app(span_exporter):
    """Create a test Flask application."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))

    test_app = create_app(
        test_config={"TESTING": True, "GREETING": "Ciao"},
        tracer_provider=provider,
        token_verifier=stub_token_verifier,
    )

    yield test_app


@pytest.fixture
def client(app):
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def greet_service(app):
    return app.extensions["greet_service"]


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {VALID_TOKEN}"}

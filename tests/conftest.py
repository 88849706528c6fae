"""
Shared fixtures for oso-cloud tests.
"""

import pytest
from fastapi.testclient import TestClient

from fake_backend import FakeBackendState, create_app
from oso_cloud import CoreClient, Oso, TransportResponse
from transport_stubs import RecordingTransport


@pytest.fixture
def make_transport():
    """Factory for ``RecordingTransport``.

    Usage:
        transport = make_transport([json_response({"allowed": True})])
    """
    def _make(responses):
        return RecordingTransport(responses)
    return _make


@pytest.fixture
def make_core_client():
    """Factory for a ``CoreClient`` with zero backoff so retry tests run fast."""
    def _make(transport, **kwargs):
        kwargs.setdefault("retry_interval", 0)
        kwargs.setdefault("retry_interval_randomness", 0)
        return CoreClient(
            base_url="https://cloud.test",
            api_key="e_test_key",
            transport=transport,
            **kwargs,
        )
    return _make


@pytest.fixture
def backend_state():
    return FakeBackendState()


@pytest.fixture
def backend_oso(backend_state):
    """An ``Oso`` client wired to the in-memory fake backend."""
    http = TestClient(create_app(backend_state))

    def _transport(method, url, headers, body, timeout):
        resp = http.request(method, url, headers=headers, content=body)
        return TransportResponse(resp.status_code, dict(resp.headers), resp.content)

    oso = Oso("http://testserver", "e_test_key", transport=_transport)
    yield oso
    http.close()

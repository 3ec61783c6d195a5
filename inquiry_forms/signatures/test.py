"""Tests for signatures module.

HTTP is mocked with httpx.MockTransport.
"""

import json

import httpx
import pytest
from pydantic import ValidationError

from inquiry_forms.errors import TransportError
from inquiry_forms.schema import Signature
from inquiry_forms.signatures import (
    BUILTIN_SIGNATURES,
    SignatureClient,
    SignatureRequest,
    SignatureService,
)
from inquiry_forms.storage import FormStore, InMemoryRepository

BASE_URL = "https://forms.example.com"

REMOTE = [
    {"id": "r1", "name": "Remote", "content": "Hi", "isDefault": False, "createdAt": "2024-01-01"},
    {"id": "r2", "name": "Main", "content": "Bye", "isDefault": True, "createdAt": "2024-01-02"},
]


def _client(handler) -> SignatureClient:
    return SignatureClient(BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


def _failing(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
def store():
    return FormStore(InMemoryRepository())


class TestSignatureClient:
    """Tests for SignatureClient with mocked HTTP."""

    @pytest.mark.unit
    def test_list_signatures(self):
        """GET returns parsed signatures."""
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            return httpx.Response(200, json=REMOTE)

        with _client(handler) as client:
            signatures = client.list_signatures()

        assert seen == [("GET", "/api/signatures")]
        assert [s.id for s in signatures] == ["r1", "r2"]
        assert signatures[1].is_default is True

    @pytest.mark.unit
    def test_create_posts_camel_case_body(self):
        """POST sends the request body with camelCase keys."""
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={**REMOTE[0], "id": "new"})

        client = _client(handler)
        created = client.create_signature(SignatureRequest(name="A", content="B", is_default=True))

        assert bodies == [{"name": "A", "content": "B", "isDefault": True}]
        assert created.id == "new"

    @pytest.mark.unit
    def test_update_and_delete_paths(self):
        """PUT and DELETE address the signature by id."""
        seen = []

        def handler(request):
            seen.append((request.method, request.url.path))
            if request.method == "DELETE":
                return httpx.Response(204)
            return httpx.Response(200, json=REMOTE[0])

        client = _client(handler)
        client.update_signature("r1", SignatureRequest(name="A", content="B"))
        client.delete_signature("r1")

        assert seen == [("PUT", "/api/signatures/r1"), ("DELETE", "/api/signatures/r1")]

    @pytest.mark.unit
    def test_non_2xx_raises_transport_error(self):
        """Non-2xx responses carry status and body."""
        client = _client(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(TransportError) as exc_info:
            client.list_signatures()
        assert exc_info.value.status_code == 500
        assert exc_info.value.response_body == "boom"

    @pytest.mark.unit
    def test_network_error_raises_transport_error(self):
        """Connection failures become TransportError."""
        with pytest.raises(TransportError, match="failed"):
            _client(_failing).list_signatures()

    @pytest.mark.unit
    def test_timeout_raises_transport_error(self):
        """Timeouts become TransportError."""

        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(TransportError, match="timed out"):
            _client(handler).list_signatures()


    @pytest.mark.unit
    @pytest.mark.parametrize(
        "body",
        [{"signatures": REMOTE}, "oops", [{"id": "r1"}], [1, 2]],
    )
    def test_unexpected_list_body_raises_transport_error(self, body):
        with _client(lambda r: httpx.Response(200, json=body)) as client:
            with pytest.raises(TransportError) as exc_info:
                client.list_signatures()
        assert exc_info.value.status_code == 200

    @pytest.mark.unit
    def test_unexpected_create_body_raises_transport_error(self):
        with _client(lambda r: httpx.Response(201, json=[])) as client:
            with pytest.raises(TransportError):
                client.create_signature(SignatureRequest(name="A", content="B"))


class TestSignatureRequest:
    """Tests for SignatureRequest."""

    @pytest.mark.unit
    @pytest.mark.parametrize("name,content", [("", "x"), ("x", "   ")])
    def test_blank_values_rejected(self, name, content):
        with pytest.raises(ValidationError):
            SignatureRequest(name=name, content=content)


class TestSignatureService:
    """Tests for SignatureService."""

    @pytest.mark.unit
    def test_local_store_seeded_with_builtins(self, store):
        """An empty local store is seeded once."""
        service = SignatureService(store)
        signatures = service.list_signatures()
        assert [s.id for s in signatures] == [s.id for s in BUILTIN_SIGNATURES]
        assert service.default_signature().id == "1"
        assert len(service.list_signatures()) == len(BUILTIN_SIGNATURES)

    @pytest.mark.unit
    def test_remote_list_is_cached_locally(self, store):
        service = SignatureService(store, _client(lambda r: httpx.Response(200, json=REMOTE)))
        assert service.default_signature().id == "r2"
        assert store.get_signature("r1") is not None

    @pytest.mark.unit
    def test_falls_back_to_local_on_transport_error(self, store, caplog):
        """A failing API falls back to the local signatures."""
        store.save_signature(Signature(id="local", name="Local", content="x", is_default=True))
        service = SignatureService(store, _client(_failing))

        with caplog.at_level("WARNING"):
            signatures = service.list_signatures()

        assert [s.id for s in signatures] == ["local"]
        assert "using local signatures" in caplog.text

    @pytest.mark.unit
    def test_save_creates_locally_and_keeps_one_default(self, store):
        service = SignatureService(store)
        service.list_signatures()

        created = service.save_signature(
            SignatureRequest(name="Support", content="Thanks", is_default=True)
        )

        defaults = [s.id for s in store.list_signatures() if s.is_default]
        assert defaults == [created.id]
        assert created.created_at

    @pytest.mark.unit
    def test_update_preserves_created_at(self, store):
        service = SignatureService(store)
        first = service.save_signature(SignatureRequest(name="A", content="B"))
        updated = service.save_signature(SignatureRequest(name="A2", content="B"), first.id)
        assert updated.id == first.id
        assert updated.created_at == first.created_at
        assert store.get_signature(first.id).name == "A2"

    @pytest.mark.unit
    def test_remote_write_errors_propagate(self, store):
        service = SignatureService(store, _client(lambda r: httpx.Response(503)))
        with pytest.raises(TransportError):
            service.save_signature(SignatureRequest(name="A", content="B"))

    @pytest.mark.unit
    def test_delete_removes_local_copy(self, store):
        service = SignatureService(store)
        created = service.save_signature(SignatureRequest(name="A", content="B"))
        service.delete_signature(created.id)
        assert store.get_signature(created.id) is None

    @pytest.mark.unit
    def test_from_environment_without_url_is_local(self, store, monkeypatch):
        monkeypatch.delenv("SIGNATURES_API_URL", raising=False)
        assert SignatureService.from_environment(store).client is None

    @pytest.mark.unit
    def test_falls_back_on_unexpected_body(self, store):
        """A malformed API response is treated like an unreachable API."""
        service = SignatureService(store, _client(lambda r: httpx.Response(200, json={"x": 1})))
        assert service.default_signature().id == BUILTIN_SIGNATURES[0].id

    @pytest.mark.unit
    def test_context_manager_closes_api_client(self, store, monkeypatch):
        monkeypatch.setenv("SIGNATURES_API_URL", BASE_URL)
        with SignatureService.from_environment(store) as service:
            http_client = service.client._client
            assert not http_client.is_closed
        assert http_client.is_closed

    @pytest.mark.unit
    def test_close_without_client_is_noop(self, store):
        SignatureService(store).close()

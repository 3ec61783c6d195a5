"""Email signatures appended to inquiry auto-replies.

Two layers:

- ``SignatureClient``: httpx client for the ``/api/signatures`` resource.
  Transport failures and non-2xx responses raise TransportError.
- ``SignatureService``: what callers use. Reads go to the API when one is
  configured and fall back to the local FormStore when it fails; with no
  API everything is local. An empty local store is seeded with the
  built-in signatures, so a default is always available.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError, field_validator

from inquiry_forms.config import EnvVar, get_environment
from inquiry_forms.errors import TransportError
from inquiry_forms.schema import SchemaModel, Signature, generate_id, now_iso
from inquiry_forms.storage import FormStore

logger = logging.getLogger(__name__)

SIGNATURES_PATH = "/api/signatures"

BUILTIN_SIGNATURES: tuple[Signature, ...] = (
    Signature(
        id="1",
        name="Default signature",
        content=(
            "Thank you for your inquiry.\n\n"
            "A member of our team will get back to you shortly.\n\n"
            "Best regards."
        ),
        is_default=True,
    ),
    Signature(
        id="2",
        name="Sales signature",
        content=(
            "Thank you very much for contacting us.\n\n"
            "Someone from our sales team will be in touch with the details.\n\n"
            "If you have any questions in the meantime, feel free to ask.\n\n"
            "Sales"
        ),
        is_default=False,
    ),
)


class SignatureRequest(SchemaModel):
    """Body of a signature create or update."""

    name: str
    content: str
    is_default: bool = False

    @field_validator("name", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


# =============================================================================
# HTTP client
# =============================================================================


class SignatureClient:
    """HTTP client for the signatures resource.

    Example:
        >>> with SignatureClient("https://forms.example.com") as client:
        ...     signatures = client.list_signatures()

    Attributes:
        base_url: Service root; requests go to ``{base_url}/api/signatures``.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize signature client.

        Args:
            base_url: Service root URL.
            timeout: Request timeout in seconds. Defaults to
                SIGNATURES_TIMEOUT.
            transport: Custom httpx transport (tests pass a MockTransport).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = (
            timeout if timeout is not None else get_environment(EnvVar.SIGNATURES_TIMEOUT)
        )
        self._client = httpx.Client(
            base_url=self.base_url, timeout=self.timeout, transport=transport
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> SignatureClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise TransportError(f"Signature request timed out: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"Signature request failed: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"Signature API returned {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:500],
            )
        return response

    def _parse(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                "Signature API returned invalid JSON",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from e

    def _signature(self, response: httpx.Response, data: Any) -> Signature:
        try:
            return Signature.model_validate(data)
        except ValidationError as e:
            raise TransportError(
                f"Signature API returned an unexpected body: {e.error_count()} errors",
                status_code=response.status_code,
                response_body=response.text[:500],
            ) from e

    def list_signatures(self) -> list[Signature]:
        """GET /api/signatures."""
        response = self._request("GET", SIGNATURES_PATH)
        data = self._parse(response)
        if not isinstance(data, list):
            raise TransportError(
                "Signature API returned an unexpected body: expected a list",
                status_code=response.status_code,
                response_body=response.text[:500],
            )
        return [self._signature(response, item) for item in data]

    def create_signature(self, request: SignatureRequest) -> Signature:
        """POST /api/signatures."""
        response = self._request("POST", SIGNATURES_PATH, json=request.to_json_dict())
        return self._signature(response, self._parse(response))

    def update_signature(self, signature_id: str, request: SignatureRequest) -> Signature:
        """PUT /api/signatures/{id}."""
        body = {"id": signature_id, **request.to_json_dict()}
        response = self._request("PUT", f"{SIGNATURES_PATH}/{signature_id}", json=body)
        return self._signature(response, self._parse(response))

    def delete_signature(self, signature_id: str) -> None:
        """DELETE /api/signatures/{id}."""
        self._request("DELETE", f"{SIGNATURES_PATH}/{signature_id}")


# =============================================================================
# Service with local fallback
# =============================================================================


class SignatureService:
    """Signature access with a repository-backed fallback.

    Args:
        store: Local persistence, used directly when ``client`` is None and
            as the fallback (and cache) when it is set.
        client: Optional remote API client.

    Example:
        >>> with SignatureService.from_environment(store) as service:
        ...     signature = service.default_signature()
    """

    def __init__(self, store: FormStore, client: SignatureClient | None = None):
        self.store = store
        self.client = client

    def close(self) -> None:
        """Close the API client, if any. The store stays open."""
        if self.client is not None:
            self.client.close()

    def __enter__(self) -> SignatureService:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @classmethod
    def from_environment(cls, store: FormStore) -> SignatureService:
        """Use the API at SIGNATURES_API_URL when set, else local only."""
        base_url = get_environment(EnvVar.SIGNATURES_API_URL)
        return cls(store, SignatureClient(base_url) if base_url else None)

    def _local_signatures(self) -> list[Signature]:
        signatures = self.store.list_signatures()
        if not signatures:
            logger.info("Seeding built-in signatures")
            for signature in BUILTIN_SIGNATURES:
                self.store.save_signature(
                    signature.model_copy(update={"created_at": now_iso()})
                )
            signatures = self.store.list_signatures()
        return signatures

    def list_signatures(self) -> list[Signature]:
        """All signatures, from the API if reachable."""
        if self.client is not None:
            try:
                signatures = self.client.list_signatures()
            except TransportError as e:
                logger.warning("Signature API unavailable, using local signatures: %s", e)
            else:
                for signature in signatures:
                    self.store.save_signature(signature)
                return signatures
        return self._local_signatures()

    def default_signature(self) -> Signature:
        """The signature flagged default, else the first, else the built-in."""
        signatures = self.list_signatures()
        for signature in signatures:
            if signature.is_default:
                return signature
        return signatures[0] if signatures else BUILTIN_SIGNATURES[0]

    def _clear_other_defaults(self, keep_id: str) -> None:
        for other in self.store.list_signatures():
            if other.is_default and other.id != keep_id:
                self.store.save_signature(other.model_copy(update={"is_default": False}))

    def save_signature(
        self, request: SignatureRequest, signature_id: str | None = None
    ) -> Signature:
        """Create (no id) or update a signature.

        Only one signature is default at a time; saving one with
        ``is_default`` clears the flag elsewhere.

        Raises:
            TransportError: If an API is configured and the write fails.
        """
        if self.client is not None:
            if signature_id is None:
                signature = self.client.create_signature(request)
            else:
                signature = self.client.update_signature(signature_id, request)
        else:
            existing = self.store.get_signature(signature_id) if signature_id else None
            signature = Signature(
                id=signature_id or generate_id(),
                name=request.name,
                content=request.content,
                is_default=request.is_default,
                created_at=existing.created_at if existing else now_iso(),
            )
        self.store.save_signature(signature)
        if signature.is_default:
            self._clear_other_defaults(signature.id)
        return signature

    def delete_signature(self, signature_id: str) -> None:
        """Delete a signature remotely (if configured) and locally."""
        if self.client is not None:
            self.client.delete_signature(signature_id)
        if self.store.get_signature(signature_id) is not None:
            self.store.delete_signature(signature_id)

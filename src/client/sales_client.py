"""Sales Service HTTP Client for consuming the Sales API."""
import json
from typing import Optional
from httpx import AsyncClient, Response

from src.client.schemas import (
    CreateClientRequest,
    ClientEnvelope,
    ClientListEnvelope,
    RecentClientsEnvelope,
    HealthResponse,
)

CLIENTS_PATH = "/api/sales/clients"


class SalesClient:
    """HTTP client for interacting with the Sales API as an authenticated sales rep."""

    def __init__(self, base_url: str, token: Optional[str] = None, client: Optional[AsyncClient] = None):
        """
        Initialize the Sales client.

        Args:
            base_url: Base URL of the Sales API (e.g., "http://localhost:5001")
            token: Bearer token sent with every authenticated request
            client: Optional httpx.AsyncClient instance. If not provided, a new one will be created.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._owns_client:
            self._client = AsyncClient(base_url=self.base_url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_client and self._client:
            await self._client.aclose()

    @property
    def client(self) -> AsyncClient:
        """Get the underlying httpx client."""
        if self._client is None:
            raise RuntimeError("Client not initialized. Use async context manager.")
        return self._client

    def _auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def health(self) -> HealthResponse:
        """Call the liveness probe (no authentication)."""
        response: Response = await self.client.get("/health")
        response.raise_for_status()
        return HealthResponse(**response.json())

    async def create_client(self, request: CreateClientRequest) -> ClientEnvelope:
        """
        Create a new client.

        Args:
            request: Client creation request

        Returns:
            Envelope holding the created client

        Raises:
            httpx.HTTPStatusError: If the request fails (e.g., 409 for a duplicate)
        """
        response: Response = await self.client.post(
            CLIENTS_PATH,
            json=request.model_dump(mode="json", exclude_none=True),
            headers=self._auth_headers(),
        )
        response.raise_for_status()
        return ClientEnvelope(**response.json())

    async def create_client_with_documents(
        self,
        request: CreateClientRequest,
        files: dict[str, tuple[str, bytes, str]],
    ) -> ClientEnvelope:
        """
        Create a new client and upload its documents in one multipart request.

        Args:
            request: Client creation request, sent as the clientData JSON field
            files: Document field name -> (filename, content, content type)

        Returns:
            Envelope holding the created client with stored document URLs

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        response: Response = await self.client.post(
            f"{CLIENTS_PATH}/with-documents",
            data={"clientData": json.dumps(request.model_dump(mode="json", exclude_none=True))},
            files=files,
            headers=self._auth_headers(),
        )
        response.raise_for_status()
        return ClientEnvelope(**response.json())

    async def list_clients(
        self,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        search: Optional[str] = None,
    ) -> ClientListEnvelope:
        """
        Get one page of the caller's clients.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        params: dict[str, str | int] = {}
        if page is not None:
            params["page"] = page
        if page_size is not None:
            params["pageSize"] = page_size
        if search is not None:
            params["search"] = search

        response: Response = await self.client.get(
            CLIENTS_PATH, params=params, headers=self._auth_headers()
        )
        response.raise_for_status()
        return ClientListEnvelope(**response.json())

    async def recent_clients(self, limit: Optional[int] = None) -> RecentClientsEnvelope:
        """
        Get the caller's most recently created clients.

        Raises:
            httpx.HTTPStatusError: If the request fails
        """
        params = {"limit": limit} if limit is not None else {}
        response: Response = await self.client.get(
            f"{CLIENTS_PATH}/recent", params=params, headers=self._auth_headers()
        )
        response.raise_for_status()
        return RecentClientsEnvelope(**response.json())

"""Python client for the Sales API."""
from src.client.sales_client import SalesClient
from src.client.schemas import CreateClientRequest, ClientResponse

__all__ = [
    "SalesClient",
    "CreateClientRequest",
    "ClientResponse",
]

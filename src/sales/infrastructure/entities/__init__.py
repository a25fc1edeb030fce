"""Database entities for the infrastructure layer."""
from src.sales.infrastructure.entities.client_entity import ClientEntity

__all__ = [
    "ClientEntity",
]

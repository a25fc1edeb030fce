from src.shared.database.base_mapper import BaseEntityMapper, copy_fields
from src.sales.core.domain.models import CLIENT_FIELDS, ClientRecord
from src.sales.infrastructure.entities.client_entity import ClientEntity


class ClientMapper(BaseEntityMapper[ClientRecord, ClientEntity]):
    """Mapper for converting between ClientRecord domain model and ClientEntity."""

    @staticmethod
    def to_entity(model_instance: ClientRecord) -> ClientEntity:
        """Convert a ClientRecord (domain model) to ClientEntity (database entity)."""
        return ClientEntity(**copy_fields(model_instance, CLIENT_FIELDS))

    @staticmethod
    def to_model(entity: ClientEntity) -> ClientRecord:
        """Convert a ClientEntity (database entity) to ClientRecord (domain model)."""
        return ClientRecord(**copy_fields(entity, CLIENT_FIELDS))

"""Dependency injection container using dependency-injector library."""
import httpx
from dependency_injector import containers, providers

from src.sales.config import get_settings
from src.shared.database.database import Database, DatabaseSettings
from src.shared.database.unit_of_work import UnitOfWork
from src.shared.database.entity_mapper import EntityMapper
from src.shared.blob_storage.s3_blober import S3BlobStorage, S3BlobStorageSettings

from src.sales.infrastructure.mappers.client_mapper import ClientMapper
from src.sales.infrastructure.client_repository import ClientRepository

from src.sales.core.services.auth_resolver import AuthResolver
from src.sales.core.services.client_service import ClientService
from src.sales.core.services.document_service import DocumentService

from src.sales.core.domain.models import ClientRecord


def create_entity_mapper(client_mapper: ClientMapper) -> EntityMapper:
    """Factory function to create EntityMapper with proper mappings."""
    return EntityMapper(
        entity_mappings={
            ClientRecord: client_mapper.to_entity,
        }
    )


def create_auth_http_client(timeout_seconds: float) -> httpx.AsyncClient:
    """
    Factory function for the HTTP client used to delegate token validation.

    One client (and its connection pool) is shared by all requests and closed
    when the application shuts down.
    """
    return httpx.AsyncClient(timeout=timeout_seconds)


class Container(containers.DeclarativeContainer):
    """Main application dependency injection container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "src.sales.api.dependencies",
            "src.sales.api.v1.clients",
        ]
    )

    # =========================================================================
    # CONFIGURATION - Singleton (loaded once, cached)
    # =========================================================================
    config = providers.Singleton(get_settings)

    # =========================================================================
    # SINGLETONS - Stateless Mappers (reusable across all requests)
    # =========================================================================
    client_mapper = providers.Singleton(ClientMapper)

    entity_mapper = providers.Singleton(
        create_entity_mapper,
        client_mapper=client_mapper,
    )

    # =========================================================================
    # SINGLETON - Database (shared connection pool)
    # =========================================================================
    database_settings = providers.Singleton(
        DatabaseSettings,
        db_url=config.provided.database_url,
        pool_size=config.provided.database.pool_size,
        max_overflow=config.provided.database.max_overflow,
        pool_timeout=config.provided.database.pool_timeout,
    )

    database = providers.Singleton(
        Database,
        db_settings=database_settings,
    )

    # =========================================================================
    # SINGLETON - S3 Storage
    # =========================================================================
    s3_storage_settings = providers.Singleton(
        S3BlobStorageSettings,
        bucket_name=config.provided.s3.bucket_name,
        endpoint_url=config.provided.s3.endpoint_url,
        public_base_url=config.provided.s3.public_base_url,
        region_name=config.provided.aws.region,
        aws_access_key_id=config.provided.aws.access_key_id,
        aws_secret_access_key=config.provided.aws.secret_access_key,
    )

    s3_storage = providers.Singleton(
        S3BlobStorage,
        settings=s3_storage_settings,
    )

    # =========================================================================
    # SINGLETONS - Authentication (shared HTTP client for the main backend)
    # =========================================================================
    auth_http_client = providers.Singleton(
        create_auth_http_client,
        timeout_seconds=config.provided.auth.timeout_seconds,
    )

    auth_resolver = providers.Singleton(
        AuthResolver,
        settings=config.provided.auth,
        http_client=auth_http_client,
    )

    # =========================================================================
    # FACTORIES - Repositories (per-request, share database singleton)
    # =========================================================================
    client_repository = providers.Factory(
        ClientRepository,
        db=database,
        mapper=client_mapper,
    )

    # =========================================================================
    # FACTORY - Unit of Work (per-request)
    # =========================================================================
    unit_of_work = providers.Factory(
        UnitOfWork,
        db=database,
        entity_mapper=entity_mapper,
    )

    # =========================================================================
    # FACTORIES - Services
    # =========================================================================
    document_service = providers.Factory(
        DocumentService,
        blob_storage=s3_storage,
        settings=config.provided.s3,
    )

    client_service = providers.Factory(
        ClientService,
        repository=client_repository,
        unit_of_work=unit_of_work,
        document_service=document_service,
        pagination=config.provided.pagination,
    )

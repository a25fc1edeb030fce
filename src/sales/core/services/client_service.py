import logging
from datetime import datetime, UTC
from typing import Any

from sqlalchemy.exc import IntegrityError

from src.sales.config import PaginationSettings
from src.sales.core.domain.models import (
    REQUIRED_CLIENT_FIELDS,
    ClientPage,
    ClientRecord,
    DocumentUpload,
    Principal,
    generate_client_id,
    parse_int_or_default,
)
from src.sales.core.services.document_service import DocumentService
from src.sales.infrastructure.client_repository import ClientRepository
from src.shared.database.unit_of_work import UnitOfWork
from src.client.schemas import CreateClientRequest

from src.shared.exceptions import ConflictingEntityFound, EntityNotFound, MissingRequiredFields

logger = logging.getLogger(__name__)

DUPLICATE_CLIENT_MESSAGE = "A client with this name and insurance provider already exists"

# Largest OFFSET the database accepts (signed 64-bit)
MAX_OFFSET = 2**63 - 1


class ClientService:
    """Service for handling ClientRecord business logic."""

    def __init__(
        self,
        repository: ClientRepository,
        unit_of_work: UnitOfWork,
        document_service: DocumentService,
        pagination: PaginationSettings,
    ):
        self.repository = repository
        self.unit_of_work = unit_of_work
        self.document_service = document_service
        self.pagination = pagination

    async def create_client(self, request: CreateClientRequest, principal: Principal) -> ClientRecord:
        """
        Create a client owned by the calling sales rep.

        Raises:
            MissingRequiredFields: If a required field is absent or blank
            ConflictingEntityFound: If the name/insurance provider pair is already taken
        """
        self._validate_required_fields(request)
        await self._ensure_not_duplicate(request)

        client = self._build_client(request, principal)
        return await self._insert(client)

    async def create_client_with_documents(
        self,
        request: CreateClientRequest,
        uploads: list[DocumentUpload],
        principal: Principal,
    ) -> ClientRecord:
        """
        Create a client and store its uploaded documents.

        Each stored document's URL is written to the field it was uploaded for.
        Documents that fail to upload are skipped; the client is still created.

        Raises:
            MissingRequiredFields: If a required field is absent or blank
            InvalidDocument: If an upload has an unsupported type or size
            ConflictingEntityFound: If the name/insurance provider pair is already taken
        """
        self._validate_required_fields(request)
        documents = self.document_service.select_uploads(uploads)
        await self._ensure_not_duplicate(request)

        client = self._build_client(request, principal)
        document_urls = await self.document_service.upload_documents(client.id, documents)
        client.attach_documents(document_urls)

        logger.info(
            "Stored %d of %d documents for client %s",
            len(document_urls), len(documents), client.id,
        )
        try:
            return await self._insert(client)
        except ConflictingEntityFound:
            if document_urls:
                logger.warning(
                    "Client %s was not created; stored documents left without a record: %s",
                    client.id, ", ".join(document_urls.values()),
                )
            raise

    async def list_clients(
        self,
        principal: Principal,
        page: Any = None,
        page_size: Any = None,
        search: str | None = None,
    ) -> ClientPage:
        """
        Get one page of the caller's clients, newest first.

        page and page_size fall back to their defaults when missing or not numeric.
        page is kept between 1 and the last page the database can address;
        page_size outside 1..max_page_size is replaced by the default (too small)
        or the maximum (too large).
        """
        size = self._bounded(page_size, self.pagination.default_page_size)
        page_number = min(max(parse_int_or_default(page, 1), 1), MAX_OFFSET // size + 1)
        term = search.strip() if search else None

        records, total = await self.repository.list_by_sales_rep(
            principal.id,
            offset=(page_number - 1) * size,
            limit=size,
            search=term or None,
        )
        return ClientPage(records=records, total=total, page=page_number, page_size=size)

    async def recent_clients(self, principal: Principal, limit: Any = None) -> list[ClientRecord]:
        """Get the caller's most recently created clients."""
        return await self.repository.recent_by_sales_rep(
            principal.id, self._bounded(limit, self.pagination.default_recent_limit)
        )

    def _bounded(self, value: Any, default: int) -> int:
        size = parse_int_or_default(value, default)
        if size < 1:
            return default
        return min(size, self.pagination.max_page_size)

    @staticmethod
    def _validate_required_fields(request: CreateClientRequest) -> None:
        missing = [
            field_name for field_name in REQUIRED_CLIENT_FIELDS
            if not getattr(request, field_name)
        ]
        if missing:
            raise MissingRequiredFields(missing)

    async def _ensure_not_duplicate(self, request: CreateClientRequest) -> None:
        # Not atomic with the insert; the unique constraint catches the remaining race
        if await self.repository.exists_with_name_and_provider(
            request.client_name, request.insurance_provider
        ):
            raise ConflictingEntityFound(
                "Client",
                DUPLICATE_CLIENT_MESSAGE,
                client_name=request.client_name,
                insurance_provider=request.insurance_provider,
            )

    @staticmethod
    def _build_client(request: CreateClientRequest, principal: Principal) -> ClientRecord:
        # The owner always comes from the authenticated principal, never from the body
        return ClientRecord(
            **request.model_dump(exclude={"id"}, mode="python"),
            id=request.id or generate_client_id(),
            sales_rep_id=principal.id,
            created_at=datetime.now(UTC),
        )

    async def _insert(self, client: ClientRecord) -> ClientRecord:
        logger.info("Creating client with ID: %s, Sales Rep ID: %s", client.id, client.sales_rep_id)
        try:
            async with self.unit_of_work:
                self.unit_of_work.add(client)
        except IntegrityError as e:
            logger.warning("Client %s violates a uniqueness constraint: %s", client.id, e.orig)
            raise ConflictingEntityFound(
                "Client",
                DUPLICATE_CLIENT_MESSAGE,
                id=client.id,
                client_name=client.client_name,
                insurance_provider=client.insurance_provider,
            ) from e

        # Re-read so the response reflects what the database stored
        created = await self.repository.get_by_id(client.id)
        if created is None:
            raise EntityNotFound("Client", client.id)
        return created

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from dependency_injector.wiring import Provide, inject
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from src.sales.containers import Container
from src.sales.core.domain.models import Principal
from src.sales.core.services.client_service import ClientService
from src.client.schemas import (
    CreateClientRequest,
    ClientEnvelope,
    ClientListEnvelope,
    RecentClientsEnvelope,
)
from src.sales.api.dependencies import get_current_principal, read_document_uploads
from src.sales.api.mappers import to_client_response, to_pagination_response
from src.shared.exceptions import ConflictingEntityFound
from src.sales.logging import get_logger

router = APIRouter(prefix="/clients", tags=["clients"])
logger = get_logger(__name__)

CLIENT_CREATED_MESSAGE = "Client created successfully"


@router.post("", response_model=ClientEnvelope, status_code=status.HTTP_201_CREATED)
@inject
async def create_client(
    request: CreateClientRequest,
    principal: Principal = Depends(get_current_principal),
    service: ClientService = Depends(Provide[Container.client_service]),
) -> ClientEnvelope:
    """Create a new client owned by the calling sales rep."""
    logger.info(f"Creating client for sales rep ID: {principal.id} ({principal.email})")
    try:
        client = await service.create_client(request, principal)
    except ConflictingEntityFound as e:
        logger.error(f"Failed to create client: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        logger.error(f"Failed to create client due to validation error: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Failed to create client due to a storage error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create client")

    return ClientEnvelope(message=CLIENT_CREATED_MESSAGE, data=to_client_response(client))


@router.post("/with-documents", response_model=ClientEnvelope, status_code=status.HTTP_201_CREATED)
@inject
async def create_client_with_documents(
    http_request: Request,
    principal: Principal = Depends(get_current_principal),
    service: ClientService = Depends(Provide[Container.client_service]),
) -> ClientEnvelope:
    """
    Create a new client and upload its documents.

    Expects multipart form data with a ``clientData`` field holding the client as
    JSON, plus one file part per document field (e.g. ``nic_proof``, ``quotation_doc``).
    A document that fails to upload is skipped; the client is still created.

    Raises:
        HTTPException 400: If clientData is missing or invalid, or a file is rejected
        HTTPException 409: If a client with the same name and insurance provider exists
    """
    form = await http_request.form()
    client_data = form.get("clientData")
    if not isinstance(client_data, str):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="clientData is required")

    try:
        request = CreateClientRequest.model_validate_json(client_data)
    except ValidationError as e:
        logger.error(f"Invalid clientData: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="clientData is not valid client JSON")

    uploads = await read_document_uploads(form)
    try:
        client = await service.create_client_with_documents(request, uploads, principal)
    except ConflictingEntityFound as e:
        logger.error(f"Failed to create client: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        logger.error(f"Failed to create client due to validation error: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Failed to create client with documents due to a storage error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create client")

    return ClientEnvelope(message=CLIENT_CREATED_MESSAGE, data=to_client_response(client))


@router.get("", response_model=ClientListEnvelope)
@inject
async def list_clients(
    page: str | None = Query(default=None, description="Page number (default 1)"),
    page_size: str | None = Query(default=None, alias="pageSize", description="Clients per page (default 10)"),
    search: str | None = Query(default=None, description="Matches name, email, mobile, product, provider or policy number"),
    principal: Principal = Depends(get_current_principal),
    service: ClientService = Depends(Provide[Container.client_service]),
) -> ClientListEnvelope:
    """Get a page of the caller's clients, newest first, optionally filtered by a search term."""
    try:
        client_page = await service.list_clients(principal, page=page, page_size=page_size, search=search)
    except SQLAlchemyError:
        logger.exception(f"Failed to list clients for sales rep {principal.id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to get clients")

    return ClientListEnvelope(
        data=[to_client_response(client) for client in client_page.records],
        pagination=to_pagination_response(client_page),
    )


@router.get("/recent", response_model=RecentClientsEnvelope)
@inject
async def get_recent_clients(
    limit: str | None = Query(default=None, description="Number of clients to return (default 10)"),
    principal: Principal = Depends(get_current_principal),
    service: ClientService = Depends(Provide[Container.client_service]),
) -> RecentClientsEnvelope:
    """Get the clients most recently created by the caller."""
    logger.info(f"Getting recent clients for sales rep ID: {principal.id}")
    try:
        clients = await service.recent_clients(principal, limit=limit)
    except SQLAlchemyError:
        logger.exception(f"Failed to get recent clients for sales rep {principal.id}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to get recent clients")

    return RecentClientsEnvelope(
        count=len(clients),
        data=[to_client_response(client) for client in clients],
    )

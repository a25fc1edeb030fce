"""Mappers for converting between domain models and API schemas."""
from src.sales.core.domain.models import ClientPage, ClientRecord
from src.client.schemas import ClientResponse, PaginationResponse


def to_client_response(client: ClientRecord) -> ClientResponse:
    """
    Convert a ClientRecord domain model to ClientResponse API schema.

    Args:
        client: Domain model

    Returns:
        API response schema
    """
    return ClientResponse.model_validate(client.model_dump())


def to_pagination_response(page: ClientPage) -> PaginationResponse:
    """Build the pagination block of a listing response."""
    return PaginationResponse(
        page=page.page,
        pageSize=page.page_size,
        total=page.total,
        totalPages=page.total_pages,
        hasNextPage=page.has_next_page,
        hasPrevPage=page.has_prev_page,
    )

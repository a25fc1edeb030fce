from typing import Optional
from sqlalchemy import ColumnElement, select, func, or_, and_

from src.sales.core.domain.models import ClientRecord
from src.shared.database.base_repo import BaseRepository
from src.shared.database.database import Database

from src.sales.infrastructure.entities.client_entity import ClientEntity
from src.sales.infrastructure.mappers.client_mapper import ClientMapper

# Columns matched by the free-text search of client listings
SEARCHABLE_COLUMNS = (
    ClientEntity.client_name,
    ClientEntity.email,
    ClientEntity.mobile_no,
    ClientEntity.product,
    ClientEntity.insurance_provider,
    ClientEntity.policy_no,
)


class ClientRepository(BaseRepository[ClientEntity, ClientRecord]):
    """Repository for ClientRecord queries. Every listing is scoped to one sales rep."""

    def __init__(self, db: Database, mapper: ClientMapper):
        super().__init__(db, mapper)

    async def get_by_id(self, client_id: str) -> Optional[ClientRecord]:
        """Get a client by ID."""
        return await self.find_one(
            select(ClientEntity).where(ClientEntity.id == client_id)
        )

    async def exists_with_name_and_provider(self, client_name: str, insurance_provider: str) -> bool:
        """Check whether a client with the same name and insurance provider already exists."""
        total = await self.count(
            select(func.count())
            .select_from(ClientEntity)
            .where(
                ClientEntity.client_name == client_name,
                ClientEntity.insurance_provider == insurance_provider,
            )
        )
        return total > 0

    async def list_by_sales_rep(
        self,
        sales_rep_id: str,
        offset: int,
        limit: int,
        search: str | None = None,
    ) -> tuple[list[ClientRecord], int]:
        """
        Get one page of a sales rep's clients, newest first, with the total match count.

        When a search term is given it is matched as a case-insensitive substring against
        client name, email, mobile number, product, insurance provider and policy number.
        A record matches if any of those columns contains the term.

        Args:
            sales_rep_id: Owner whose clients are listed
            offset: Number of matching rows to skip
            limit: Maximum number of rows to return
            search: Optional search term, expected to be trimmed and non-empty

        Returns:
            Tuple of (clients on the page, total clients matching the filter)
        """
        criteria = self._listing_criteria(sales_rep_id, search)

        count_stmt = select(func.count()).select_from(ClientEntity).where(criteria)
        data_stmt = (
            select(ClientEntity)
            .where(criteria)
            # id breaks ties between rows created in the same instant so pages never overlap
            .order_by(ClientEntity.created_at.desc(), ClientEntity.id.desc())
            .offset(offset)
            .limit(limit)
        )

        return await self.find_page(count_stmt, data_stmt)

    async def recent_by_sales_rep(self, sales_rep_id: str, limit: int) -> list[ClientRecord]:
        """Get the most recently created clients of a sales rep."""
        return await self.find_all(
            select(ClientEntity)
            .where(ClientEntity.sales_rep_id == sales_rep_id)
            .order_by(ClientEntity.created_at.desc(), ClientEntity.id.desc())
            .limit(limit)
        )

    @staticmethod
    def _listing_criteria(sales_rep_id: str, search: str | None) -> ColumnElement[bool]:
        owned_by_rep = ClientEntity.sales_rep_id == sales_rep_id
        if not search:
            return owned_by_rep

        # autoescape keeps % and _ in the term literal
        matches_search = or_(
            *(column.icontains(search, autoescape=True) for column in SEARCHABLE_COLUMNS)
        )
        return and_(owned_by_rep, matches_search)

from typing import Optional

from sqlalchemy import func, select

from src.shared.database.base_repo import BaseRepository
from tests.shared.database.mock_entities import AgentEntity, AgentModel


class AgentRepository(BaseRepository[AgentEntity, AgentModel]):
    async def get_by_id(self, agent_id: str) -> Optional[AgentModel]:
        return await self.find_one(select(AgentEntity).where(AgentEntity.id == agent_id))

    async def count_in_branch(self, branch: str) -> int:
        return await self.count(
            select(func.count()).select_from(AgentEntity).where(AgentEntity.branch == branch)
        )

    async def page_in_branch(self, branch: str, offset: int, limit: int) -> tuple[list[AgentModel], int]:
        criteria = AgentEntity.branch == branch
        return await self.find_page(
            select(func.count()).select_from(AgentEntity).where(criteria),
            select(AgentEntity).where(criteria).order_by(AgentEntity.id).offset(offset).limit(limit),
        )

import abc
from typing import Generic, TypeVar, Optional

from sqlalchemy import Executable

from src.shared.database.base_mapper import BaseEntityMapper
from src.shared.database.database import Database


TEntity = TypeVar("TEntity")
TModel = TypeVar("TModel")


class BaseRepository(abc.ABC, Generic[TEntity, TModel]):
    def __init__(self, db: Database, mapper: BaseEntityMapper[TModel, TEntity]):
        self.db = db
        self.mapper = mapper

    async def find_one(self, statement: Executable) -> Optional[TModel]:
        async with self.db.session_maker() as session:
            result = await session.execute(statement)
            entity = result.scalar_one_or_none()
            if entity is None:
                return None
            return self.mapper.to_model(entity)

    async def find_all(self, statement: Executable) -> list[TModel]:
        async with self.db.session_maker() as session:
            result = await session.execute(statement)
            entities = list(result.scalars().all())
            return [self.mapper.to_model(entity) for entity in entities]

    async def count(self, statement: Executable) -> int:
        """
        Execute a query returning a single aggregate value.

        Args:
            statement: SQLAlchemy select statement returning one scalar (e.g. COUNT(*))

        Returns:
            The scalar as an int, 0 when the query yields no row
        """
        async with self.db.session_maker() as session:
            result = await session.execute(statement)
            value = result.scalar_one_or_none()
        return int(value or 0)

    async def find_page(
        self, count_statement: Executable, data_statement: Executable
    ) -> tuple[list[TModel], int]:
        """
        Execute a count query and a data query and return both results.

        Use this for paginated listings where the total is computed with the same
        filter as the page but without offset and limit.

        Args:
            count_statement: Statement returning the total number of matching rows
            data_statement: Statement returning the entities of the requested page

        Returns:
            Tuple of (models on the page, total matching rows)
        """
        total = await self.count(count_statement)
        models = await self.find_all(data_statement)
        return models, total

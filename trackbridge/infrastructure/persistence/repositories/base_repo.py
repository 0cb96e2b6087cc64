"""Shared repository plumbing: model mappers and statement execution."""

from typing import Generic, Protocol, TypeVar

from attrs import define
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from trackbridge.infrastructure.persistence.database.db_models import (
    TrackbridgeDBBase,
)
from trackbridge.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)

TDBModel = TypeVar("TDBModel", bound=TrackbridgeDBBase)
TDomainModel = TypeVar("TDomainModel")


class ModelMapper(Protocol[TDBModel, TDomainModel]):
    """Converts rows to domain entities and back."""

    @staticmethod
    async def to_domain(db_model: TDBModel) -> TDomainModel: ...

    @staticmethod
    def to_db(domain_model: TDomainModel) -> TDBModel: ...

    @classmethod
    async def map_collection(
        cls, db_models: list[TDBModel]
    ) -> list[TDomainModel]: ...


@define(frozen=True, slots=True)
class BaseModelMapper(Generic[TDBModel, TDomainModel]):
    """Mapper base whose ``map_collection`` dispatches to the subclass ``to_domain``."""

    @staticmethod
    async def to_domain(db_model: TDBModel) -> TDomainModel:
        raise NotImplementedError("Subclasses must implement to_domain")

    @staticmethod
    def to_db(domain_model: TDomainModel) -> TDBModel:
        raise NotImplementedError("Subclasses must implement to_db")

    @classmethod
    async def map_collection(cls, db_models: list[TDBModel]) -> list[TDomainModel]:
        return [await cls.to_domain(db_model) for db_model in db_models]


class BaseRepository(Generic[TDBModel, TDomainModel]):
    """Holds the session, row class and mapper for one aggregate's table."""

    def __init__(
        self,
        session: AsyncSession,
        model_class: type[TDBModel],
        mapper: ModelMapper[TDBModel, TDomainModel],
    ) -> None:
        self.session = session
        self.model_class = model_class
        self.mapper = mapper

    def select(self) -> Select[tuple[TDBModel]]:
        return select(self.model_class)

    def select_by_id(self, id_: int) -> Select[tuple[TDBModel]]:
        return self.select().where(self.model_class.id == id_)

    async def _flush_and_refresh(self, entity: TDBModel) -> TDBModel:
        """Flush pending changes and reload server-side defaults."""
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    @db_operation("execute_select_one")
    async def execute_select_one(
        self, stmt: Select[tuple[TDBModel]]
    ) -> TDBModel | None:
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    @db_operation("execute_select_many")
    async def execute_select_many(
        self, stmt: Select[tuple[TDBModel]]
    ) -> list[TDBModel]:
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

import abc
from typing import Any, Generic, Iterable, TypeVar


TModel = TypeVar("TModel")
TEntity = TypeVar("TEntity")


def copy_fields(source: Any, field_names: Iterable[str]) -> dict[str, Any]:
    """Read the named attributes from an object into a dict of keyword arguments."""
    return {name: getattr(source, name) for name in field_names}


class BaseEntityMapper(abc.ABC, Generic[TModel, TEntity]):
    """Two-way conversion between a domain model and its database entity."""

    @staticmethod
    @abc.abstractmethod
    def to_entity(model_instance: TModel) -> TEntity:
        pass

    @staticmethod
    @abc.abstractmethod
    def to_model(entity: TEntity) -> TModel:
        pass

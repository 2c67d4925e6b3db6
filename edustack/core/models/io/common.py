"""
Shared I/O building blocks.

Every request and response model derives from ``IOModel``: JSON keys are
camelCase on the wire (snake_case is accepted on input too) and ORM
entities can be validated directly. When an entity is validated only its
already-loaded attributes are read, so serializing never triggers a lazy
load on an async session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import inspect

if TYPE_CHECKING:
    from edustack.core.database.repositories.base import Page

DataT = TypeVar("DataT")


def is_entity(value: Any) -> bool:
    """True for mapped ORM instances (anything SQLAlchemy can inspect)."""
    return not isinstance(value, type) and inspect(value, raiseerr=False) is not None


def orm_fields(entity: Any) -> Dict[str, Any]:
    """Column values and loaded relationships of ``entity``; unloaded ones are omitted."""
    state = inspect(entity)
    unloaded = state.unloaded
    return {key: getattr(entity, key) for key in state.mapper.attrs.keys() if key not in unloaded}


class IOModel(BaseModel):
    """Base for API payloads."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    @model_validator(mode="before")
    @classmethod
    def _from_entity(cls, data: Any) -> Any:
        if is_entity(data):
            return cls.from_entity_fields(orm_fields(data))
        return data

    @classmethod
    def from_entity_fields(cls, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Hook for subclasses deriving extra fields from an entity's loaded attributes."""
        return fields


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope wrapping every successful response."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[DataT] = None


class Pagination(IOModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, page: Page) -> "Pagination":
        return cls(
            current_page=page.page,
            total_pages=page.total_pages,
            total_count=page.total,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )

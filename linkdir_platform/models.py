"""
Entity model for the link directory.

Responsibilities:
    - Define the read shapes returned by every storage backend
      (`Category`, `LinkItem`)
    - Define the write shapes accepted by them (`*Create`, `*Update`)
    - Coerce loosely-typed caller input (dicts from JSON bodies, scripts)
      into those shapes, raising the storage-layer `ValidationError`

Field naming:
    Python attributes are snake_case. The stored and serialized names are
    the camelCase aliases (`createdDate`, `categoryId`, ...), which is also
    what the relational columns and document keys are called. Both spellings
    are accepted on input.

LLM Prompt Example:
    "Show how a pydantic alias generator lets one model serve as the Python
    API, the JSON wire format and the storage column naming at once."
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .storage.errors import ValidationError

__all__ = [
    "Category",
    "CategoryCreate",
    "CategoryUpdate",
    "LinkItem",
    "LinkCreate",
    "LinkUpdate",
    "coerce",
    "new_id",
    "utc_now",
]

ModelT = TypeVar("ModelT", bound=BaseModel)


def new_id() -> str:
    """Return a fresh record id (random 128-bit, hex encoded)."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- Read shapes ----------------------------------------------------------


class Category(_Record):
    """A persisted category."""

    id: str
    name: str
    slug: str
    created_date: datetime
    icon: Optional[str] = None


class LinkItem(_Record):
    """
    A persisted link.

    `category_name` is derived: only `get_links()` fills it from the join.
    Records returned by add/update leave it as None.
    """

    id: str
    title: str
    url: str
    category_id: str
    category_name: Optional[str] = None
    created_date: datetime
    image_url: str = ""
    ai_hint: str = ""
    description: str = ""
    favicon_url: str = ""


# ---- Write shapes ---------------------------------------------------------


class _New(_Record):
    """Base for create shapes: `createdDate` is always stored as UTC."""

    @field_validator("created_date", check_fields=False)
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        # naive values are taken to be UTC already
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class CategoryCreate(_New):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    icon: Optional[str] = None
    created_date: datetime = Field(default_factory=utc_now)


class LinkCreate(_New):
    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    category_id: str = Field(min_length=1)
    image_url: str = ""
    ai_hint: str = ""
    description: str = ""
    favicon_url: str = ""
    created_date: datetime = Field(default_factory=utc_now)


class _Update(_Record):
    """
    Base for partial updates.

    Unknown keys (`id`, `createdDate`, `categoryName`, ...) are dropped by
    pydantic, so they can never reach a backend.
    """

    def changes(self) -> Dict[str, Any]:
        """Explicitly supplied, non-None fields keyed by storage name."""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        return {key: value for key, value in data.items() if value is not None}


class CategoryUpdate(_Update):
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    icon: Optional[str] = None


class LinkUpdate(_Update):
    title: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = Field(default=None, min_length=1)
    category_id: Optional[str] = Field(default=None, min_length=1)
    image_url: Optional[str] = None
    ai_hint: Optional[str] = None
    description: Optional[str] = None
    favicon_url: Optional[str] = None


def coerce(model_cls: Type[ModelT], data: Union[ModelT, BaseModel, Mapping[str, Any]]) -> ModelT:
    """
    Return `data` as an instance of `model_cls`.

    Raises:
        ValidationError: if required fields are missing/empty or types are wrong.
    """
    if isinstance(data, model_cls):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, exclude_unset=True)
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(f"Invalid {model_cls.__name__}: {problems}") from exc

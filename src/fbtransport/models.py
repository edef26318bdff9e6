"""Value and notification models."""

from __future__ import annotations

import dataclasses
from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fbtransport.exceptions import InvalidArgumentError

#: JSON-compatible value as stored in the database.
JsonValue: TypeAlias = str | int | float | bool | None | list["JsonValue"] | dict[str, "JsonValue"]


class ChildEvent(StrEnum):
    CHILD_ADDED = "child_added"
    CHILD_CHANGED = "child_changed"


class ChildSnapshot(BaseModel):
    """State of one immediate child of a watched node.

    ``path`` is the location of the child itself, as a slash path or as a
    full database URL.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    path: str
    value: Any = None


class Record(BaseModel):
    """One ``(id, band)`` record as delivered to callers.

    ``value`` is ``None`` when a change happened somewhere below the band and
    was not fetched. A band that holds a bare leaf instead of a mapping is
    passed through as is.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Thing identifier")
    band: str = Field(..., description="Data category of the thing")
    value: Any = None

    @field_validator("id", "band")
    @classmethod
    def _require_non_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("id and band must be non-empty")
        return value

    def as_args(self) -> tuple[str, str, Any]:
        return self.id, self.band, self.value


@dataclasses.dataclass(frozen=True)
class Scope:
    """Optional ``id``/``band`` narrowing of a subscription or delete.

    Empty strings count as "not given".
    """

    id: str | None = None
    band: str | None = None

    def __post_init__(self) -> None:
        if self.band and not self.id:
            raise InvalidArgumentError("band given without id")

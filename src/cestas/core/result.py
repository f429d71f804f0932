"""
Cestas Core - Operation results.

Table operations never raise past their own boundary; they return either a
``Success`` carrying the canonical data or a ``Failure`` carrying a message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel

T = TypeVar("T")


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T = None  # type: ignore[assignment]

    success = True

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "data": _dump(self.data)}


@dataclass(frozen=True)
class Failure:
    error: str
    details: Any = None
    code: str | None = None

    success = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": False, "error": self.error}
        if self.code:
            out["code"] = self.code
        if self.details is not None:
            out["details"] = _dump(self.details)
        return out


Result = Union[Success[T], Failure]

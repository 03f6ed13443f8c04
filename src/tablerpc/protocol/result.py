"""Tagged call results returned by the client facade."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from pydantic import BaseModel

from ..errors import CallError


@dataclass(frozen=True)
class CallResult:
    """Outcome of one call: exactly one of `data` or `error` is set.

    Serializes to the same shape the peer's clients expect:
        {"data": {...}}  or  {"error": {...}}
    """

    data: BaseModel | None = None
    error: BaseModel | None = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("CallResult needs exactly one of data or error")

    @classmethod
    def success(cls, data: BaseModel) -> CallResult:
        return cls(data=data)

    @classmethod
    def failure(cls, error: BaseModel) -> CallResult:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        """True if the call resolved with data."""
        return self.data is not None

    @property
    def request_id(self) -> str | None:
        """The request_id echoed by the peer (success results only)."""
        return getattr(self.data, "request_id", None)

    def unwrap(self) -> BaseModel:
        """Return the response data, or raise CallError with the error."""
        if self.data is None:
            raise CallError(cast(BaseModel, self.error))
        return self.data

    def model_dump(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with a single key."""
        if self.data is not None:
            return {"data": self.data.model_dump(mode="json")}
        return {"error": cast(BaseModel, self.error).model_dump(mode="json")}

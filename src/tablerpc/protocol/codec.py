"""Wire codec: one request per text frame, inbound frames classified.

Classification order matters. A frame is first validated against the error
union; only when that fails is it validated against the success union. The
two unions use disjoint `type` tags, so at most one of them can match.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import ERROR_ADAPTER, BadRequest
from .responses import RESPONSE_ADAPTER

logger = logging.getLogger(__name__)

# Longest slice of an undecodable frame quoted in the BadRequest message
MAX_QUOTED_FRAME = 200


class FrameKind(str, Enum):
    """How an inbound frame was classified."""

    ERROR = "error"  # Peer error, carries no request_id
    DATA = "data"  # Success response, matched by request_id
    INVALID = "invalid"  # Matched neither shape


@dataclass(frozen=True)
class DecodedFrame:
    """Result of classifying one inbound frame."""

    kind: FrameKind
    value: BaseModel
    request_id: str | None = None

    @property
    def is_error(self) -> bool:
        return self.kind == FrameKind.ERROR

    @property
    def is_data(self) -> bool:
        return self.kind == FrameKind.DATA

    @property
    def is_invalid(self) -> bool:
        return self.kind == FrameKind.INVALID


class MessageCodec:
    """Encodes requests and classifies inbound frames.

    The success and error unions are injectable so the same codec serves any
    tag vocabulary, not just the table protocol.
    """

    def __init__(
        self,
        response_adapter: TypeAdapter[Any] = RESPONSE_ADAPTER,
        error_adapter: TypeAdapter[Any] = ERROR_ADAPTER,
    ):
        self._response_adapter = response_adapter
        self._error_adapter = error_adapter

    def encode(self, request: BaseModel) -> str:
        """Serialize a request to a single JSON text frame.

        Optional clauses left at their None default (sort, page) are omitted.
        Required fields are always sent, so a null key stays null.

        Raises:
            ValueError: If the request has no request_id
        """
        if not getattr(request, "request_id", None):
            raise ValueError("Request has no request_id; stamp one before encoding")

        omitted = {
            name
            for name, info in type(request).model_fields.items()
            if info.default is None and getattr(request, name) is None
        }
        return json.dumps(request.model_dump(mode="json", exclude=omitted))

    def decode(self, frame: str | bytes) -> DecodedFrame:
        """Classify an inbound frame as error, data, or invalid."""
        if isinstance(frame, bytes):
            return self._invalid("Received a non-text frame")

        try:
            payload = json.loads(frame)
        except json.JSONDecodeError:
            return self._invalid(f"Received a non-JSON frame: {frame[:MAX_QUOTED_FRAME]}")

        error = self._validate(self._error_adapter, payload)
        if error is not None:
            return DecodedFrame(kind=FrameKind.ERROR, value=error)

        response = self._validate(self._response_adapter, payload)
        if response is not None:
            return DecodedFrame(
                kind=FrameKind.DATA,
                value=response,
                request_id=getattr(response, "request_id", None),
            )

        request_id = payload.get("request_id") if isinstance(payload, dict) else None
        frame_type = payload.get("type") if isinstance(payload, dict) else None
        return self._invalid(
            f"Frame matched no known response shape (type={frame_type!r})",
            request_id if isinstance(request_id, str) else None,
        )

    @staticmethod
    def _validate(adapter: TypeAdapter[Any], payload: Any) -> BaseModel | None:
        try:
            return adapter.validate_python(payload)
        except ValidationError:
            return None

    @staticmethod
    def _invalid(message: str, request_id: str | None = None) -> DecodedFrame:
        logger.warning(f"Undecodable frame: {message}")
        return DecodedFrame(
            kind=FrameKind.INVALID,
            value=BadRequest(message=message),
            request_id=request_id,
        )

"""Pydantic request models for the vote and comment operations.

These models provide a consistent "validate → normalize → execute" flow.
Each validator raises a :class:`~pydantic_core.PydanticCustomError` whose
type is the wire error code; :func:`validate_request` reports the first
one, so field declaration order decides which code wins.

Moderation filters are passed through the validation context::

    VoteRequest.model_validate(body, context={"moderation": moderation})
"""

from __future__ import annotations

import enum
import math
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator, model_validator
from pydantic_core import PydanticCustomError

from pyhammer._constants import (
    COMMENT_LOTS,
    LOT_IDS,
    MAX_COMMENT_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PRICE,
    MIN_COMMENT_LENGTH,
)
from pyhammer.exceptions import HammerValidationError
from pyhammer.moderation import Moderation

_RequestT = TypeVar("_RequestT", bound=BaseModel)

# Fallback codes for errors not raised by our own validators.
_FIELD_CODES: dict[str, str] = {
    "lot": "BAD_LOT",
    "type": "BAD_TYPE",
    "name": "NAME_REQUIRED",
    "price": "BAD_PRICE",
    "text": "COMMENT_TOO_SHORT",
}

# Plain decimal literals only: no digit separators, no inf/nan spellings.
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class VoteKind(enum.StrEnum):
    UNSOLD = "UNSOLD"
    PRICE = "PRICE"


def _moderation(info: ValidationInfo) -> Moderation:
    context = info.context or {}
    moderation = context.get("moderation")
    if isinstance(moderation, Moderation):
        return moderation
    return Moderation.default()


def _as_text(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value).strip()


def _check_name_shape(name: str) -> None:
    if not name:
        raise PydanticCustomError("NAME_REQUIRED", "name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise PydanticCustomError(
            "NAME_TOO_LONG",
            "name must be at most {max_length} characters",
            {"max_length": MAX_NAME_LENGTH},
        )


def _parse_price(value: Any) -> int | float:
    if isinstance(value, bool):
        raise PydanticCustomError("BAD_PRICE", "price must be a number")
    if isinstance(value, str):
        raw = value.strip()
        if not _DECIMAL_RE.fullmatch(raw):
            raise PydanticCustomError("BAD_PRICE", "price must be a number")
        value = float(raw) if any(c in raw for c in ".eE") else int(raw)
    if not isinstance(value, (int, float)):
        raise PydanticCustomError("BAD_PRICE", "price must be a number")
    if not math.isfinite(value) or value <= 0:
        raise PydanticCustomError("BAD_PRICE", "price must be a positive finite number")
    if value > MAX_PRICE:
        raise PydanticCustomError(
            "PRICE_TOO_HIGH",
            "price must be at most {max_price}",
            {"max_price": MAX_PRICE},
        )
    return value


class _RequestModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        validate_default=True,
    )


class VoteRequest(_RequestModel):
    """A settle/price prediction on one lot."""

    lot: str = ""
    kind: VoteKind | None = Field(default=None, alias="type")
    name: str = ""
    price: int | float | None = None

    @model_validator(mode="before")
    @classmethod
    def _ignore_price_unless_priced(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("type") != VoteKind.PRICE.value and "price" in data:
            data = {k: v for k, v in data.items() if k != "price"}
        return data

    @field_validator("lot", mode="before")
    @classmethod
    def _check_lot(cls, value: Any) -> str:
        if not isinstance(value, str) or value not in LOT_IDS:
            raise PydanticCustomError("BAD_LOT", "lot must be one of {allowed}", {"allowed": ", ".join(LOT_IDS)})
        return value

    @field_validator("kind", mode="before")
    @classmethod
    def _check_kind(cls, value: Any) -> VoteKind:
        if not isinstance(value, str) or value not in VoteKind.__members__:
            raise PydanticCustomError("BAD_TYPE", "type must be UNSOLD or PRICE")
        return VoteKind(value)

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: Any, info: ValidationInfo) -> str:
        name = _as_text(value)
        _check_name_shape(name)
        moderation = _moderation(info)
        if moderation.profanity.is_disallowed(name):
            raise PydanticCustomError("NAME_PROFANITY", "name contains profanity")
        if moderation.restricted.is_disallowed(name):
            raise PydanticCustomError("NAME_DISALLOWED", "name contains a disallowed term")
        return name

    @field_validator("price", mode="before")
    @classmethod
    def _check_price(cls, value: Any) -> int | float | None:
        if value is None:
            return None
        return _parse_price(value)

    @model_validator(mode="after")
    def _price_required_for_priced_votes(self) -> VoteRequest:
        if self.kind is VoteKind.PRICE and self.price is None:
            raise PydanticCustomError("BAD_PRICE", "price is required for PRICE votes")
        return self


class CommentRequest(_RequestModel):
    """A short comment on one lot or on both (``"all"``)."""

    lot: str = ""
    name: str = ""
    text: str = ""

    @field_validator("lot", mode="before")
    @classmethod
    def _check_lot(cls, value: Any) -> str:
        if not isinstance(value, str) or value not in COMMENT_LOTS:
            raise PydanticCustomError(
                "BAD_LOT", "lot must be one of {allowed}", {"allowed": ", ".join(COMMENT_LOTS)}
            )
        return value

    @field_validator("name", mode="before")
    @classmethod
    def _check_name(cls, value: Any, info: ValidationInfo) -> str:
        name = _as_text(value)
        _check_name_shape(name)
        if _moderation(info).is_disallowed(name):
            raise PydanticCustomError("NAME_DISALLOWED", "name contains a disallowed term")
        return name

    @field_validator("text", mode="before")
    @classmethod
    def _check_text(cls, value: Any, info: ValidationInfo) -> str:
        text = _as_text(value)
        if len(text) < MIN_COMMENT_LENGTH:
            raise PydanticCustomError(
                "COMMENT_TOO_SHORT",
                "comment must be at least {min_length} characters",
                {"min_length": MIN_COMMENT_LENGTH},
            )
        if len(text) > MAX_COMMENT_LENGTH:
            raise PydanticCustomError(
                "COMMENT_TOO_LONG",
                "comment must be at most {max_length} characters",
                {"max_length": MAX_COMMENT_LENGTH},
            )
        if _moderation(info).is_disallowed(text):
            raise PydanticCustomError("COMMENT_DISALLOWED", "comment contains a disallowed term")
        return text


def validate_request(
    model: type[_RequestT],
    body: Any,
    *,
    moderation: Moderation | None = None,
) -> _RequestT:
    """Validate *body* into *model*, raising the first failure as a wire code.

    Raises
    ------
    HammerValidationError
        With ``code`` set to the first error's wire code (``BAD_JSON`` when
        *body* is not an object).
    """
    if not isinstance(body, dict):
        raise HammerValidationError("BAD_JSON", "request body must be a JSON object")
    try:
        return model.model_validate(body, context={"moderation": moderation or Moderation.default()})
    except ValidationError as exc:
        first = exc.errors()[0]
        code = first["type"]
        if not code.isupper():
            field = str(first["loc"][0]) if first["loc"] else ""
            code = _FIELD_CODES.get(field, "BAD_JSON")
        raise HammerValidationError(code, first["msg"]) from exc

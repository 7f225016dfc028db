from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from app.relay.policy import DEFAULT_SHEET_NAME, OVERRIDE_FIELDS


class ForwardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sheet_name: str = Field(default=DEFAULT_SHEET_NAME, alias="sheetName")
    values: Any = None
    destination_override: str | None = Field(
        default=None,
        validation_alias=AliasChoices(*OVERRIDE_FIELDS),
    )

    @field_validator("sheet_name", mode="before")
    @classmethod
    def _default_sheet_name(cls, value: Any) -> Any:
        if value is None or value == "":
            return DEFAULT_SHEET_NAME
        return value if isinstance(value, str) else str(value)

    @field_validator("destination_override", mode="before")
    @classmethod
    def _normalize_override(cls, value: Any) -> str | None:
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None


class ForwardEnvelope(BaseModel):
    """Body sent to the destination. Only these two fields ever leave the relay."""

    model_config = ConfigDict(populate_by_name=True)

    sheet_name: str = Field(alias="sheetName")
    values: list[Any]


class RelayResponse(BaseModel):
    ok: bool
    forwarded: bool | None = None
    status: int | None = None
    text: str | None = None
    error: str | None = None
    details: str | None = None
    gas_response: str | None = Field(default=None, serialization_alias="gasResponse")
    elapsed: str


class PifResponse(BaseModel):
    success: bool
    data: list[Any] | None = None
    error: str | None = None


class SymbolWriteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    symbols: list[str]
    full_data: list[Any] | None = Field(default=None, alias="fullData")
    timestamp: datetime | None = None

    @field_validator("full_data", "timestamp", mode="wrap")
    @classmethod
    def _drop_unusable_optional(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        # Optional fields fall back to their defaults instead of failing the write.
        try:
            return handler(value)
        except ValidationError:
            return None


class SymbolSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbols: list[str] = Field(default_factory=list)
    full_data: list[Any] = Field(default_factory=list, serialization_alias="fullData")
    timestamp: datetime | None = None


class SymbolWriteResponse(BaseModel):
    success: bool
    count: int | None = None
    error: str | None = None


class SymbolReadResponse(BaseModel):
    success: bool
    symbols: list[str]
    full_data: list[Any] | None = Field(default=None, serialization_alias="fullData")
    count: int
    timestamp: datetime | None = None
    message: str | None = None

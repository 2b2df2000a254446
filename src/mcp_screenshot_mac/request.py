"""Validation of raw tool arguments into a ScreenshotRequest."""

from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from mcp_screenshot_mac.exceptions import RequestValidationError
from mcp_screenshot_mac.models import ImageFormat

DEFAULT_TIMEOUT_MS = 30_000
MIN_TIMEOUT_MS = 1_000

# Advertised to MCP clients. Mirrors ScreenshotRequest.
INPUT_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "anyOf": [{"required": ["bundleId"]}, {"required": ["appName"]}],
    "properties": {
        "bundleId": {"type": "string", "description": "e.g. com.apple.Safari"},
        "appName": {
            "type": "string",
            "description": "e.g. Safari, when the bundle id is unknown",
        },
        "windowIndex": {"type": "integer", "minimum": 0, "default": 0},
        "format": {"type": "string", "enum": ["png", "jpg"], "default": "png"},
        "includeShadow": {"type": "boolean", "default": False},
        "timeoutMs": {
            "type": "integer",
            "minimum": MIN_TIMEOUT_MS,
            "default": DEFAULT_TIMEOUT_MS,
        },
        "preferWindowId": {"type": "boolean", "default": False},
    },
}


class ScreenshotRequest(BaseModel):
    """A validated, defaulted screenshot request.

    Field names are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        strict=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    bundle_id: str | None = Field(default=None, min_length=1)
    app_name: str | None = Field(default=None, min_length=1)
    window_index: int = Field(default=0, ge=0)
    format: ImageFormat = "png"
    include_shadow: bool = False
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=MIN_TIMEOUT_MS)
    prefer_window_id: bool = False

    @field_validator("window_index", "timeout_ms", mode="before")
    @classmethod
    def _accept_whole_number_floats(cls, value: Any) -> Any:
        # JSON has a single number type; 5000.0 is an integer, 5000.5 is not
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @model_validator(mode="after")
    def _require_app_selector(self) -> "ScreenshotRequest":
        if not self.bundle_id and not self.app_name:
            raise ValueError("Either bundleId or appName is required")
        return self

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    @property
    def app_label(self) -> str:
        """Whatever identifies the app best, for error context."""
        return self.app_name or self.bundle_id or ""


def validate_request(raw: Any) -> ScreenshotRequest:
    """Parse raw tool arguments, applying defaults.

    Raises:
        RequestValidationError: listing every violated constraint, one per line
    """
    if raw is None:
        raw = {}
    try:
        return ScreenshotRequest.model_validate(raw)
    except pydantic.ValidationError as e:
        raise RequestValidationError(_format_errors(e)) from e


def _format_errors(error: pydantic.ValidationError) -> str:
    lines = []
    for detail in error.errors(include_url=False):
        location = ".".join(str(part) for part in detail["loc"])
        lines.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "\n".join(lines)

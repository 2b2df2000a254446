"""Values passed between the window resolver, the capturer and the handler."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ImageFormat = Literal["png", "jpg"]


class Rect(BaseModel):
    """A window rectangle in device pixels."""

    x: int
    y: int
    w: int
    h: int

    def to_screencapture_arg(self) -> str:
        return f"{self.x},{self.y},{self.w},{self.h}"


class WindowInfo(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    app_name: str
    rect: Rect
    scale: float = Field(gt=0, description="Backing scale factor of the window's display")


class CaptureResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    path: str = Field(description="Absolute path of the captured image")
    format: ImageFormat
    rect: Rect
    scale: float
    app_name: str

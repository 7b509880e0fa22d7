from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import AspectRatio, ExportFormat, FontSize, SlideLayout

DEFAULT_PRESENTATION_TITLE = "Untitled Presentation"
DEFAULT_THEME = "professional"


class Slide(BaseModel):
    """A single slide; only ever stored as part of a presentation's slide array."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Slide identifier, unique within its presentation")
    title: str = Field(default="", description="Slide title")
    bullets: list[str] = Field(default_factory=list, description="Ordered bullet points")
    layout: SlideLayout = Field(default=SlideLayout.TITLE_BULLETS)
    images: list[str] = Field(default_factory=list, description="Image URLs or data URIs")
    notes: str | None = Field(default=None, description="Speaker notes")


class PresentationSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ratio: AspectRatio = Field(default=AspectRatio.WIDESCREEN)
    font_size: FontSize = Field(default=FontSize.MEDIUM, alias="fontSize")
    animations: bool = True


class PresentationCreate(BaseModel):
    """Fields supplied when a presentation is first stored."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(default=DEFAULT_PRESENTATION_TITLE, min_length=1)
    prompt: str = ""
    slides: list[Slide] = Field(default_factory=list)
    theme: str = DEFAULT_THEME
    settings: PresentationSettings = Field(default_factory=PresentationSettings)


class PresentationUpdate(BaseModel):
    """Partial update; every field present replaces the stored field wholesale."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(default=None, min_length=1)
    prompt: str | None = None
    slides: list[Slide] | None = None
    theme: str | None = None
    settings: PresentationSettings | None = None


class Presentation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str = Field(..., min_length=1)
    prompt: str = ""
    slides: list[Slide] = Field(default_factory=list)
    theme: str = DEFAULT_THEME
    settings: PresentationSettings = Field(default_factory=PresentationSettings)
    created_at: datetime = Field(..., alias="createdAt")


class DocumentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str
    content: str
    type: str
    presentation_id: int | None = Field(default=None, alias="presentationId")


class Document(DocumentCreate):
    """Uploaded source material, weakly linked to a presentation."""

    id: int


class SlideImageCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str
    url: str
    slide_index: int = Field(..., ge=0, alias="slideIndex")
    presentation_id: int | None = Field(default=None, alias="presentationId")


class SlideImageRecord(SlideImageCreate):
    """Uploaded slide image. `slide_index` is the array position at upload time."""

    id: int


class RepromptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reprompt: str = Field(..., max_length=4000, description="Instruction describing the change")
    ai_model: str | None = Field(default=None, alias="aiModel", description="Model identifier")


class ExportRequest(BaseModel):
    format: ExportFormat


class ExportResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    download_url: str = Field(..., alias="downloadUrl")


class GeneratedOutline(BaseModel):
    """Structural result of outline generation, not yet stored."""

    title: str | None = None
    slides: list[Slide] = Field(default_factory=list)


class ThemeInfo(BaseModel):
    id: str
    name: str
    description: str


class AIModelInfo(BaseModel):
    id: str
    provider: str
    model: str
    configured: bool = Field(..., description="Whether a credential for the provider is available")


class APIResponse(BaseModel):
    """Generic API response wrapper"""

    success: bool = True
    message: str = "Success"
    data: Any | None = None
    error: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)


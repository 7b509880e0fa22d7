"""Slide-array builders for the presentation update protocol.

The store never merges individual slides: every slide edit is expressed by
building the complete new ``slides`` array and submitting it as one field.
Each helper here returns a new list and leaves its input untouched.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import uuid4

from shared.enums import SlideLayout
from shared.errors import SlideIndexError
from shared.models import PresentationSettings, Slide

NEW_SLIDE_TITLE = "New Slide"
NEW_SLIDE_BULLET = "Add your content here"
NEW_BULLET_TEXT = "New bullet point"


def _check_index(index: int, length: int, what: str = "slide") -> None:
    if not 0 <= index < length:
        raise SlideIndexError(f"Invalid {what} index {index} (have {length})")


def new_slide_id(existing: Sequence[Slide] = ()) -> str:
    """Generate a slide id that does not collide with any existing slide id."""
    taken = {slide.id for slide in existing}
    while True:
        candidate = f"slide-{uuid4().hex[:8]}"
        if candidate not in taken:
            return candidate


def blank_slide(existing: Sequence[Slide] = ()) -> Slide:
    return Slide(
        id=new_slide_id(existing),
        title=NEW_SLIDE_TITLE,
        bullets=[NEW_SLIDE_BULLET],
        layout=SlideLayout.TITLE_BULLETS,
        images=[],
        notes="",
    )


def add_slide(slides: Sequence[Slide], slide: Slide | None = None) -> list[Slide]:
    """Append a slide (a blank "New Slide" by default), keeping every prior slide in order."""
    return [*slides, slide if slide is not None else blank_slide(slides)]


def delete_slide(slides: Sequence[Slide], index: int) -> list[Slide]:
    _check_index(index, len(slides))
    return [slide for position, slide in enumerate(slides) if position != index]


def replace_slide(slides: Sequence[Slide], index: int, slide: Slide) -> list[Slide]:
    _check_index(index, len(slides))
    updated = list(slides)
    updated[index] = slide
    return updated


def move_slide(slides: Sequence[Slide], source: int, destination: int) -> list[Slide]:
    """Move the slide at ``source`` so that it ends up at ``destination``."""
    _check_index(source, len(slides))
    _check_index(destination, len(slides))
    updated = list(slides)
    updated.insert(destination, updated.pop(source))
    return updated


def update_slide_fields(slides: Sequence[Slide], index: int, **fields) -> list[Slide]:
    """Replace individual fields of one slide. The slide id cannot be changed this way."""
    _check_index(index, len(slides))
    fields.pop("id", None)
    current = slides[index]
    return replace_slide(slides, index, Slide.model_validate({**current.model_dump(), **fields}))


def change_layout(slides: Sequence[Slide], index: int, layout: SlideLayout | str) -> list[Slide]:
    return update_slide_fields(slides, index, layout=SlideLayout(layout))


def add_bullet(slides: Sequence[Slide], index: int, text: str = NEW_BULLET_TEXT) -> list[Slide]:
    _check_index(index, len(slides))
    return update_slide_fields(slides, index, bullets=[*slides[index].bullets, text])


def update_bullet(slides: Sequence[Slide], index: int, bullet_index: int, text: str) -> list[Slide]:
    _check_index(index, len(slides))
    bullets = list(slides[index].bullets)
    _check_index(bullet_index, len(bullets), "bullet")
    bullets[bullet_index] = text
    return update_slide_fields(slides, index, bullets=bullets)


def remove_bullet(slides: Sequence[Slide], index: int, bullet_index: int) -> list[Slide]:
    _check_index(index, len(slides))
    bullets = slides[index].bullets
    _check_index(bullet_index, len(bullets), "bullet")
    return update_slide_fields(
        slides, index, bullets=[b for position, b in enumerate(bullets) if position != bullet_index]
    )


def attach_image(slides: Sequence[Slide], index: int, url: str) -> list[Slide]:
    """Append an uploaded image URL to one slide's images."""
    _check_index(index, len(slides))
    return update_slide_fields(slides, index, images=[*slides[index].images, url])


def remove_image(slides: Sequence[Slide], index: int, image_index: int) -> list[Slide]:
    _check_index(index, len(slides))
    images = slides[index].images
    _check_index(image_index, len(images), "image")
    return update_slide_fields(
        slides, index, images=[url for position, url in enumerate(images) if position != image_index]
    )


def step_font_size(settings: PresentationSettings, direction: str) -> PresentationSettings:
    """Return a full settings object with the font size moved one step, clamped at the ends.

    Settings are replaced wholesale on update, so the caller submits the result as-is.
    """
    return settings.model_copy(update={"font_size": settings.font_size.step(direction)})

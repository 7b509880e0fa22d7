import asyncio
from datetime import UTC, datetime

import pytest

from services.presentations.store import InMemoryPresentationStore, apply_shallow_update, coerce_changes
from shared.enums import AspectRatio, FontSize, SlideLayout
from shared.errors import PresentationNotFoundError
from shared.models import (
    DocumentCreate,
    Presentation,
    PresentationCreate,
    PresentationSettings,
    Slide,
    SlideImageCreate,
)


def make_slides(*titles: str) -> list[Slide]:
    return [
        Slide(id=f"slide-{index}", title=title, bullets=[f"{title} point"])
        for index, title in enumerate(titles, start=1)
    ]


def test_coerce_changes_drops_nulls_and_immutable_fields() -> None:
    changes = coerce_changes({"title": "Renamed", "prompt": None, "id": 42, "createdAt": "2020-01-01"})
    assert changes == {"title": "Renamed"}


@pytest.mark.asyncio
async def test_ids_increase_and_are_never_reused() -> None:
    store = InMemoryPresentationStore()
    first = await store.create_presentation(PresentationCreate(title="One"))
    second = await store.create_presentation(PresentationCreate(title="Two"))
    assert (first.id, second.id) == (1, 2)

    assert await store.delete_presentation(second.id) is True
    third = await store.create_presentation(PresentationCreate(title="Three"))
    assert third.id == 3
    assert [p.id for p in await store.list_presentations()] == [1, 3]


@pytest.mark.asyncio
async def test_create_applies_defaults() -> None:
    store = InMemoryPresentationStore()
    presentation = await store.create_presentation(PresentationCreate())

    assert presentation.title == "Untitled Presentation"
    assert presentation.theme == "professional"
    assert presentation.settings == PresentationSettings()
    assert presentation.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_slides_update_replaces_whole_array_and_keeps_other_fields() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(
        PresentationCreate(title="Deck", prompt="about decks", slides=make_slides("A", "B", "C"))
    )
    new_slides = make_slides("Only")

    await store.update_presentation(created.id, {"slides": [s.model_dump() for s in new_slides]})
    stored = await store.get_presentation(created.id)

    assert stored is not None
    assert stored.slides == new_slides
    assert stored.title == "Deck"
    assert stored.prompt == "about decks"
    assert stored.created_at == created.created_at


@pytest.mark.asyncio
async def test_settings_are_replaced_not_merged() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(
        PresentationCreate(settings=PresentationSettings(font_size=FontSize.LARGE, animations=False))
    )

    updated = await store.update_presentation(created.id, {"settings": {"ratio": "4:3"}})

    assert updated.settings.ratio is AspectRatio.STANDARD
    assert updated.settings.font_size is FontSize.MEDIUM
    assert updated.settings.animations is True


@pytest.mark.asyncio
async def test_update_cannot_change_identity() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(PresentationCreate(title="Deck"))

    updated = await store.update_presentation(created.id, {"id": 99, "title": "Renamed", "theme": None})

    assert updated.id == created.id
    assert updated.title == "Renamed"
    assert updated.theme == "professional"
    assert await store.get_presentation(99) is None


@pytest.mark.asyncio
async def test_update_of_unknown_id_creates_nothing() -> None:
    store = InMemoryPresentationStore()

    with pytest.raises(PresentationNotFoundError):
        await store.update_presentation(7, {"title": "Ghost"})

    assert await store.get_presentation(7) is None
    assert await store.list_presentations() == []


@pytest.mark.asyncio
async def test_returned_records_are_copies() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(PresentationCreate(slides=make_slides("A")))

    created.slides[0].bullets.append("tampered")
    fetched = await store.get_presentation(created.id)
    fetched.slides.clear()

    stored = await store.get_presentation(created.id)
    assert stored.slides[0].bullets == ["A point"]


@pytest.mark.asyncio
async def test_failing_mutator_leaves_record_untouched() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(PresentationCreate(title="Deck"))

    def explode(_current):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await store.modify_presentation(created.id, explode)

    assert (await store.get_presentation(created.id)).title == "Deck"


@pytest.mark.asyncio
async def test_modify_presentation_reads_current_state() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(PresentationCreate(slides=make_slides("A")))

    async def append(title: str):
        return await store.modify_presentation(
            created.id, lambda current: {"slides": [*current.slides, *make_slides(title)]}
        )

    await asyncio.gather(*(append(f"S{n}") for n in range(5)))

    stored = await store.get_presentation(created.id)
    assert len(stored.slides) == 6


@pytest.mark.asyncio
async def test_concurrent_updates_keep_one_submitted_value_per_field() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(PresentationCreate(title="Start"))
    submitted = [
        {"title": f"Title {n}", "slides": [s.model_dump() for s in make_slides(*[f"T{n}"] * (n + 1))]}
        for n in range(10)
    ]

    await asyncio.gather(*(store.update_presentation(created.id, change) for change in submitted))

    stored = await store.get_presentation(created.id)
    assert stored.title in {change["title"] for change in submitted}
    slide_arrays = [[Slide(**s) for s in change["slides"]] for change in submitted]
    assert stored.slides in slide_arrays


@pytest.mark.asyncio
async def test_delete_does_not_cascade_to_documents_or_images() -> None:
    store = InMemoryPresentationStore()
    created = await store.create_presentation(PresentationCreate())
    await store.create_document(
        DocumentCreate(filename="notes.txt", content="hi", type="text/plain", presentation_id=created.id)
    )
    await store.create_slide_image(
        SlideImageCreate(filename="a.png", url="data:image/png;base64,AA==", slide_index=0, presentation_id=created.id)
    )

    assert await store.delete_presentation(created.id) is True
    assert await store.delete_presentation(created.id) is False

    assert len(await store.get_documents_by_presentation_id(created.id)) == 1
    assert len(await store.get_slide_images_by_presentation_id(created.id)) == 1


@pytest.mark.asyncio
async def test_documents_and_images_are_filtered_by_presentation() -> None:
    store = InMemoryPresentationStore()
    for presentation_id in (1, 2, 1):
        await store.create_document(
            DocumentCreate(filename="doc.txt", content="x", type="text/plain", presentation_id=presentation_id)
        )
    image = await store.create_slide_image(
        SlideImageCreate(filename="a.png", url="u", slide_index=2, presentation_id=2)
    )

    documents = await store.get_documents_by_presentation_id(1)
    assert [d.id for d in documents] == [1, 3]
    assert image.id == 1
    assert (await store.get_slide_image(image.id)).slide_index == 2
    assert await store.get_slide_images_by_presentation_id(1) == []

    assert await store.delete_slide_image(image.id) is True
    assert await store.delete_slide_image(image.id) is False
    assert await store.get_slide_image(image.id) is None


@pytest.mark.asyncio
async def test_reset_clears_records_and_counters() -> None:
    store = InMemoryPresentationStore()
    await store.create_presentation(PresentationCreate())
    await store.create_document(DocumentCreate(filename="a", content="b", type="text/plain"))

    await store.reset()

    assert await store.list_presentations() == []
    assert (await store.create_presentation(PresentationCreate())).id == 1
    assert (await store.create_document(DocumentCreate(filename="a", content="b", type="text/plain"))).id == 1


def test_apply_shallow_update_validates_merged_record() -> None:
    slide = Slide(id="s", layout=SlideLayout.FULL_IMAGE)
    current = Presentation(id=1, title="Deck", created_at=datetime.now(UTC), slides=[slide])
    merged = apply_shallow_update(current, {"theme": "modern"})

    assert merged.theme == "modern"
    assert merged.slides == [slide]
    assert current.theme == "professional"

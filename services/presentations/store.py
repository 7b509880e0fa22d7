"""Presentation document store: identity, shallow partial updates and per-presentation locking."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from shared.errors import PresentationNotFoundError
from shared.models import (
    Document,
    DocumentCreate,
    Presentation,
    PresentationCreate,
    PresentationUpdate,
    SlideImageCreate,
    SlideImageRecord,
)
from shared.utils import setup_logging

logger = setup_logging("presentation-store")

PresentationChanges = PresentationUpdate | dict[str, Any]
PresentationMutator = Callable[[Presentation], PresentationChanges]

# Fields an update may never touch
IMMUTABLE_FIELDS = {"id", "created_at"}


def coerce_changes(changes: PresentationChanges) -> dict[str, Any]:
    """Normalize an update payload to the set of fields it explicitly replaces.

    Keys that are absent, or explicitly null, leave the stored field untouched.
    """
    if not isinstance(changes, PresentationUpdate):
        changes = PresentationUpdate.model_validate(changes)
    return {
        field: value
        for field, value in changes.model_dump(exclude_unset=True).items()
        if value is not None and field not in IMMUTABLE_FIELDS
    }


def apply_shallow_update(current: Presentation, changes: PresentationChanges) -> Presentation:
    """Return a new record where every supplied field fully replaces the stored one.

    Nested values (``settings``, ``slides``) are replaced wholesale, never merged.
    The merged record is validated before anything is written.
    """
    merged = current.model_dump()
    merged.update(coerce_changes(changes))
    return Presentation.model_validate(merged)


class PresentationStore(ABC):
    """Single source of truth for presentations, documents and slide images.

    Mutations of one presentation are serialized through a per-id lock, so a
    read-modify-write never interleaves with another mutation of the same id.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}
        self._create_lock = asyncio.Lock()

    def _lock_for(self, presentation_id: int) -> asyncio.Lock:
        lock = self._locks.get(presentation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[presentation_id] = lock
        return lock

    async def update_presentation(
        self, presentation_id: int, changes: PresentationChanges
    ) -> Presentation:
        """Shallow-merge ``changes`` into the stored presentation and return the result."""
        return await self.modify_presentation(presentation_id, lambda _current: changes)

    async def modify_presentation(
        self, presentation_id: int, mutator: PresentationMutator
    ) -> Presentation:
        """Atomically derive changes from the current record and apply them.

        ``mutator`` receives a copy of the current presentation and returns the
        fields to replace. If it raises, nothing is written.
        """
        async with self._lock_for(presentation_id):
            current = await self.get_presentation(presentation_id)
            if current is None:
                raise PresentationNotFoundError(f"Presentation {presentation_id} not found")
            updated = apply_shallow_update(current, mutator(current))
            await self._replace_presentation(updated)
            logger.debug("Updated presentation %s", presentation_id)
            return updated.model_copy(deep=True)

    async def delete_presentation(self, presentation_id: int) -> bool:
        """Remove a presentation. Documents and images referencing it are kept."""
        async with self._lock_for(presentation_id):
            existed = await self._remove_presentation(presentation_id)
        self._locks.pop(presentation_id, None)
        if existed:
            logger.info("Deleted presentation %s", presentation_id)
        return existed

    @abstractmethod
    async def create_presentation(self, data: PresentationCreate) -> Presentation:
        """Assign the next id, stamp created_at and store the record."""

    @abstractmethod
    async def get_presentation(self, presentation_id: int) -> Presentation | None:
        """Return a copy of the record, or None if absent."""

    @abstractmethod
    async def list_presentations(self) -> list[Presentation]:
        """Return all presentations in insertion order."""

    @abstractmethod
    async def _replace_presentation(self, presentation: Presentation) -> None:
        """Overwrite the stored record with the given one (called under its lock)."""

    @abstractmethod
    async def _remove_presentation(self, presentation_id: int) -> bool:
        """Drop the stored record (called under its lock)."""

    @abstractmethod
    async def create_document(self, data: DocumentCreate) -> Document:
        pass

    @abstractmethod
    async def get_documents_by_presentation_id(self, presentation_id: int) -> list[Document]:
        pass

    @abstractmethod
    async def create_slide_image(self, data: SlideImageCreate) -> SlideImageRecord:
        pass

    @abstractmethod
    async def get_slide_image(self, image_id: int) -> SlideImageRecord | None:
        pass

    @abstractmethod
    async def get_slide_images_by_presentation_id(
        self, presentation_id: int
    ) -> list[SlideImageRecord]:
        pass

    @abstractmethod
    async def delete_slide_image(self, image_id: int) -> bool:
        pass

    @abstractmethod
    async def reset(self) -> None:
        """Clear all records and identity counters (primarily for tests)."""


class InMemoryPresentationStore(PresentationStore):
    """Process-lifetime store backed by dictionaries; state is lost on restart."""

    def __init__(self) -> None:
        super().__init__()
        self._presentations: dict[int, Presentation] = {}
        self._documents: dict[int, Document] = {}
        self._slide_images: dict[int, SlideImageRecord] = {}
        self._next_presentation_id = 1
        self._next_document_id = 1
        self._next_slide_image_id = 1

    async def create_presentation(self, data: PresentationCreate) -> Presentation:
        async with self._create_lock:
            presentation_id = self._next_presentation_id
            presentation = Presentation(
                id=presentation_id,
                created_at=datetime.now(UTC),
                **data.model_dump(),
            )
            self._presentations[presentation_id] = presentation
            self._next_presentation_id += 1
        logger.info("Created presentation %s with %d slides", presentation_id, len(presentation.slides))
        return presentation.model_copy(deep=True)

    async def get_presentation(self, presentation_id: int) -> Presentation | None:
        presentation = self._presentations.get(presentation_id)
        return presentation.model_copy(deep=True) if presentation else None

    async def list_presentations(self) -> list[Presentation]:
        return [presentation.model_copy(deep=True) for presentation in self._presentations.values()]

    async def _replace_presentation(self, presentation: Presentation) -> None:
        self._presentations[presentation.id] = presentation.model_copy(deep=True)

    async def _remove_presentation(self, presentation_id: int) -> bool:
        return self._presentations.pop(presentation_id, None) is not None

    async def create_document(self, data: DocumentCreate) -> Document:
        async with self._create_lock:
            document = Document(id=self._next_document_id, **data.model_dump())
            self._documents[document.id] = document
            self._next_document_id += 1
        return document.model_copy(deep=True)

    async def get_documents_by_presentation_id(self, presentation_id: int) -> list[Document]:
        return [
            document.model_copy(deep=True)
            for document in self._documents.values()
            if document.presentation_id == presentation_id
        ]

    async def create_slide_image(self, data: SlideImageCreate) -> SlideImageRecord:
        async with self._create_lock:
            record = SlideImageRecord(id=self._next_slide_image_id, **data.model_dump())
            self._slide_images[record.id] = record
            self._next_slide_image_id += 1
        return record.model_copy(deep=True)

    async def get_slide_image(self, image_id: int) -> SlideImageRecord | None:
        record = self._slide_images.get(image_id)
        return record.model_copy(deep=True) if record else None

    async def get_slide_images_by_presentation_id(
        self, presentation_id: int
    ) -> list[SlideImageRecord]:
        return [
            record.model_copy(deep=True)
            for record in self._slide_images.values()
            if record.presentation_id == presentation_id
        ]

    async def delete_slide_image(self, image_id: int) -> bool:
        return self._slide_images.pop(image_id, None) is not None

    async def reset(self) -> None:
        async with self._create_lock:
            self._presentations.clear()
            self._documents.clear()
            self._slide_images.clear()
            self._locks.clear()
            self._next_presentation_id = 1
            self._next_document_id = 1
            self._next_slide_image_id = 1

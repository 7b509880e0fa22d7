"""SQLAlchemy-backed presentation store, a durable drop-in for the in-memory store."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from database import create_database_engine, create_session_factory, init_database
from shared.db import DocumentDB, PresentationDB, SlideImageDB
from shared.models import (
    Document,
    DocumentCreate,
    Presentation,
    PresentationCreate,
    SlideImageCreate,
    SlideImageRecord,
)
from shared.utils import setup_logging

from .store import PresentationStore

logger = setup_logging("presentation-sql-store")


class SQLPresentationStore(PresentationStore):
    """Store presentations, documents and slide images in a relational database.

    Slides and settings are kept as JSON documents on the presentation row, so
    the whole-array replacement contract maps onto a single column write.
    Session work runs in a worker thread so a slow database does not stall
    the event loop. Locking is per process; it does not coordinate multiple
    workers.
    """

    def __init__(
        self,
        database_url: str | None = None,
        engine: Engine | None = None,
    ) -> None:
        super().__init__()
        self.engine = engine or create_database_engine(database_url)
        init_database(self.engine)
        self._session_factory: sessionmaker[Session] = create_session_factory(self.engine)

    async def create_presentation(self, data: PresentationCreate) -> Presentation:
        async with self._create_lock:
            presentation = await asyncio.to_thread(self._insert_presentation, data)
        logger.info("Created presentation %s with %d slides", presentation.id, len(presentation.slides))
        return presentation

    async def get_presentation(self, presentation_id: int) -> Presentation | None:
        return await asyncio.to_thread(self._fetch_presentation, presentation_id)

    async def list_presentations(self) -> list[Presentation]:
        return await asyncio.to_thread(self._fetch_presentations)

    async def _replace_presentation(self, presentation: Presentation) -> None:
        await asyncio.to_thread(self._write_presentation, presentation)

    async def _remove_presentation(self, presentation_id: int) -> bool:
        return await asyncio.to_thread(self._delete_rows, PresentationDB, presentation_id)

    async def create_document(self, data: DocumentCreate) -> Document:
        async with self._create_lock:
            return await asyncio.to_thread(self._insert_document, data)

    async def get_documents_by_presentation_id(self, presentation_id: int) -> list[Document]:
        return await asyncio.to_thread(self._fetch_documents, presentation_id)

    async def create_slide_image(self, data: SlideImageCreate) -> SlideImageRecord:
        async with self._create_lock:
            return await asyncio.to_thread(self._insert_slide_image, data)

    async def get_slide_image(self, image_id: int) -> SlideImageRecord | None:
        return await asyncio.to_thread(self._fetch_slide_image, image_id)

    async def get_slide_images_by_presentation_id(
        self, presentation_id: int
    ) -> list[SlideImageRecord]:
        return await asyncio.to_thread(self._fetch_slide_images, presentation_id)

    async def delete_slide_image(self, image_id: int) -> bool:
        return await asyncio.to_thread(self._delete_rows, SlideImageDB, image_id)

    async def reset(self) -> None:
        """Drop every row. Autoincrement counters are kept, so ids stay unique."""
        async with self._create_lock:
            await asyncio.to_thread(self._delete_all_rows)
            self._locks.clear()

    # Blocking session work, run through asyncio.to_thread

    def _insert_presentation(self, data: PresentationCreate) -> Presentation:
        payload = data.model_dump(mode="json")
        with self._session_factory() as session:
            row = PresentationDB(
                title=payload["title"],
                prompt=payload["prompt"],
                slides=payload["slides"],
                theme=payload["theme"],
                settings=payload["settings"],
                created_at=datetime.now(UTC),
            )
            session.add(row)
            session.commit()
            return self._presentation_to_model(row)

    def _fetch_presentation(self, presentation_id: int) -> Presentation | None:
        with self._session_factory() as session:
            row = session.get(PresentationDB, presentation_id)
            return self._presentation_to_model(row) if row else None

    def _fetch_presentations(self) -> list[Presentation]:
        with self._session_factory() as session:
            rows = session.scalars(select(PresentationDB).order_by(PresentationDB.id)).all()
            return [self._presentation_to_model(row) for row in rows]

    def _write_presentation(self, presentation: Presentation) -> None:
        payload = presentation.model_dump(mode="json")
        with self._session_factory() as session:
            row = session.get(PresentationDB, presentation.id)
            if row is None:
                return
            row.title = payload["title"]
            row.prompt = payload["prompt"]
            row.slides = payload["slides"]
            row.theme = payload["theme"]
            row.settings = payload["settings"]
            session.commit()

    def _insert_document(self, data: DocumentCreate) -> Document:
        with self._session_factory() as session:
            row = DocumentDB(**data.model_dump())
            session.add(row)
            session.commit()
            return self._document_to_model(row)

    def _fetch_documents(self, presentation_id: int) -> list[Document]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(DocumentDB)
                .where(DocumentDB.presentation_id == presentation_id)
                .order_by(DocumentDB.id)
            ).all()
            return [self._document_to_model(row) for row in rows]

    def _insert_slide_image(self, data: SlideImageCreate) -> SlideImageRecord:
        with self._session_factory() as session:
            row = SlideImageDB(**data.model_dump())
            session.add(row)
            session.commit()
            return self._slide_image_to_model(row)

    def _fetch_slide_image(self, image_id: int) -> SlideImageRecord | None:
        with self._session_factory() as session:
            row = session.get(SlideImageDB, image_id)
            return self._slide_image_to_model(row) if row else None

    def _fetch_slide_images(self, presentation_id: int) -> list[SlideImageRecord]:
        with self._session_factory() as session:
            rows = session.scalars(
                select(SlideImageDB)
                .where(SlideImageDB.presentation_id == presentation_id)
                .order_by(SlideImageDB.id)
            ).all()
            return [self._slide_image_to_model(row) for row in rows]

    def _delete_rows(self, model: type[PresentationDB] | type[SlideImageDB], row_id: int) -> bool:
        with self._session_factory() as session:
            result = session.execute(delete(model).where(model.id == row_id))
            session.commit()
            return result.rowcount > 0

    def _delete_all_rows(self) -> None:
        with self._session_factory() as session:
            session.execute(delete(SlideImageDB))
            session.execute(delete(DocumentDB))
            session.execute(delete(PresentationDB))
            session.commit()

    @staticmethod
    def _presentation_to_model(row: PresentationDB) -> Presentation:
        created_at = row.created_at
        # SQLite drops tzinfo on the way back
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return Presentation(
            id=row.id,
            title=row.title,
            prompt=row.prompt,
            slides=row.slides or [],
            theme=row.theme,
            settings=row.settings,
            created_at=created_at,
        )

    @staticmethod
    def _document_to_model(row: DocumentDB) -> Document:
        return Document(
            id=row.id,
            filename=row.filename,
            content=row.content,
            type=row.type,
            presentation_id=row.presentation_id,
        )

    @staticmethod
    def _slide_image_to_model(row: SlideImageDB) -> SlideImageRecord:
        return SlideImageRecord(
            id=row.id,
            filename=row.filename,
            url=row.url,
            slide_index=row.slide_index,
            presentation_id=row.presentation_id,
        )

"""SQLAlchemy ORM models for database tables."""

from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PresentationDB(Base):
    """Presentation with its slide array and settings stored as JSON documents."""

    __tablename__ = "presentations"
    # Ids must never be reused after a delete
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    prompt = Column(Text, nullable=False, default="")
    slides = Column(JSON, nullable=False, default=list)
    theme = Column(String(100), nullable=False, default="professional")
    settings = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self) -> str:
        return f"<PresentationDB(id={self.id}, title={self.title})>"


class DocumentDB(Base):
    """Uploaded source document. presentation_id is a lookup key, not a foreign key."""

    __tablename__ = "documents"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(String(255), nullable=False)
    presentation_id = Column(Integer, nullable=True, index=True)


class SlideImageDB(Base):
    """Uploaded slide image. presentation_id is a lookup key, not a foreign key."""

    __tablename__ = "slide_images"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(500), nullable=False)
    url = Column(Text, nullable=False)
    slide_index = Column(Integer, nullable=False)
    presentation_id = Column(Integer, nullable=True, index=True)

"""SQLAlchemy database models."""

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class BookModel(Base):
    """Snapshot of a catalog volume, shared by every library that holds it."""

    __tablename__ = "books"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    google_books_id = Column(String(255), nullable=True, unique=True, index=True)
    isbn = Column(String(20), nullable=True)
    title = Column(String(500), nullable=False, index=True)
    subtitle = Column(String(500), nullable=True)
    authors = Column(JSON, default=list, nullable=False)
    publisher = Column(String(255), nullable=True)
    published_date = Column(String(50), nullable=True)
    page_count = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    cover_url = Column(Text, nullable=True)
    thumbnail_url = Column(Text, nullable=True)
    categories = Column(JSON, default=list, nullable=False)
    average_rating = Column(Float, nullable=True)
    ratings_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    entries = relationship("LibraryEntryModel", back_populates="book", cascade="all, delete-orphan")


class LibraryEntryModel(Base):
    """A book on a user's shelf, with its reading status."""

    __tablename__ = "library_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="uq_library_user_book"),
        Index("ix_library_user_added", "user_id", "added_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)  # subject from the auth layer
    book_id = Column(Uuid, ForeignKey("books.id"), nullable=False, index=True)
    status = Column(String(20), default="want_to_read", nullable=False)
    user_rating = Column(Integer, nullable=True)  # 1-5
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    book = relationship("BookModel", back_populates="entries", lazy="selectin")

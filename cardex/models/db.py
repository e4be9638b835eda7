"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class CardDB(Base):
    """
    A card record.

    Rows without a user_id are templates synced from the catalog and are
    authoritative for name, image, expansion and type. Rows with a user_id
    are that user's copy and carry the collected flag.
    """

    __tablename__ = "cards"
    __table_args__ = (
        UniqueConstraint("card_id", "user_id", name="uq_card_user"),
        # NULL user ids are distinct to the constraint above
        Index(
            "uq_template_card",
            "card_id",
            unique=True,
            postgresql_where=text("user_id IS NULL"),
            sqlite_where=text("user_id IS NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    card_id: Mapped[str] = mapped_column(String(64), index=True)
    user_id: Mapped[str | None] = mapped_column(String(255), index=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    image_url: Mapped[str] = mapped_column(String(512))
    expansion: Mapped[str] = mapped_column(String(64), index=True)
    card_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_collected: Mapped[bool] = mapped_column(Boolean, default=False)
    date_collected: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __repr__(self) -> str:
        return f"<CardDB(card_id={self.card_id}, user_id={self.user_id})>"


class ExpansionDB(Base):
    """An expansion synced from the catalog."""

    __tablename__ = "expansions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    logo: Mapped[str | None] = mapped_column(String(512), nullable=True)
    release_date: Mapped[str | None] = mapped_column(String(32), nullable=True)

    def __repr__(self) -> str:
        return f"<ExpansionDB(id={self.id}, name={self.name})>"


class BinderDB(Base):
    """
    A user's virtual binder.

    The uuid primary key is the only identifier binders are looked up by.
    """

    __tablename__ = "binders"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_binder_user_name"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255))
    color: Mapped[str] = mapped_column(String(32), default="red")
    slot_count: Mapped[int] = mapped_column(Integer, default=180)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    slots: Mapped[list["BinderSlotDB"]] = relationship(
        back_populates="binder", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<BinderDB(id={self.id}, name={self.name})>"


class BinderSlotDB(Base):
    """One occupied pocket of a binder."""

    __tablename__ = "binder_slots"
    __table_args__ = (UniqueConstraint("binder_id", "slot_number", name="uq_binder_slot"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    binder_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("binders.id", ondelete="CASCADE"), index=True
    )
    slot_number: Mapped[int] = mapped_column(Integer)
    card_id: Mapped[str] = mapped_column(String(64))
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    binder: Mapped["BinderDB"] = relationship(back_populates="slots")

    def __repr__(self) -> str:
        return f"<BinderSlotDB(binder={self.binder_id}, slot={self.slot_number})>"


class WishlistItemDB(Base):
    """A card the user wants, with the price it was last seen at."""

    __tablename__ = "wishlist_items"
    __table_args__ = (UniqueConstraint("user_id", "card_id", name="uq_wishlist_user_card"),)

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    card_id: Mapped[str] = mapped_column(String(64))

    # Snapshot of the card at the time it was added
    card: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    price: Mapped[float] = mapped_column(Float)
    date_added: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    def __repr__(self) -> str:
        return f"<WishlistItemDB(card={self.card_id}, price={self.price})>"


class StatsDB(Base):
    """Cached aggregate, refreshed when older than the configured TTL."""

    __tablename__ = "stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(64), unique=True)
    total_count: Mapped[int] = mapped_column(Integer, default=0)

    # expansion slug -> number of tracked cards
    counts: Mapped[dict[str, int]] = mapped_column(JSON, default=dict)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<StatsDB(type={self.type}, total={self.total_count})>"

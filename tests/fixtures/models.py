# tests/fixtures/models.py
"""Declarative models for ORM adapter and end-to-end tests.

Item is deliberately not trackable: it is reference data expected to exist
with the same ids in every environment.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from seedtrail.contracts import BelongsTo


class Base(DeclarativeBase):
    pass


class Player(Base):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)
    reference: Mapped[str] = mapped_column(String(64), unique=True)
    name: Mapped[str | None] = mapped_column(String(100), default=None)


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __candidate_key__ = ("player_id", "item_id")

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(ForeignKey("players.id"))
    item_id: Mapped[int] = mapped_column(ForeignKey("items.id"))
    quantity: Mapped[int] = mapped_column(default=1)

    player: Mapped[Player] = relationship()
    item: Mapped[Item] = relationship()


class Comment(Base):
    __tablename__ = "comments"
    __candidate_key__ = ("commentable_type", "commentable_id", "reference")
    __polymorphic_references__ = (BelongsTo("commentable_id", polymorphic=True, type_attribute="commentable_type"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    commentable_type: Mapped[str] = mapped_column(String(64))
    commentable_id: Mapped[int]
    reference: Mapped[str] = mapped_column(String(64))
    body: Mapped[str | None] = mapped_column(default=None)


class Category(Base):
    __tablename__ = "categories"
    __candidate_key__ = ("parent_id", "reference")

    id: Mapped[int] = mapped_column(primary_key=True)
    reference: Mapped[str] = mapped_column(String(64))
    parent_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id"), default=None)

    parent: Mapped[Category | None] = relationship(remote_side=[id])


class Tournament(Base):
    __tablename__ = "tournaments"
    __candidate_key__ = ("name", "starts_at")

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    starts_at: Mapped[datetime] = mapped_column(DateTime)
    prize: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), default=None)


TRACKABLE_MODELS = (Player, InventoryItem, Comment, Category, Tournament)

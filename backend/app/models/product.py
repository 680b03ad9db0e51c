"""
Product API — Product SQLAlchemy Model
========================================

What:  ORM model representing one stored product document (`products` table).
Why:   Maps Python objects to database rows for type-safe database operations.
Who:   Used by ProductService for CRUD operations.
When:  Instantiated when creating products; queried when listing/fetching.

Field Design:
    - id: UUID generated on insert, never changed afterwards
    - name: required, the only field a client must send on create
    - quantity / price: default to 0 so partial documents stay valid
    - image: optional URL or path of a product picture
    - created_at / updated_at: UTC timestamps maintained by the model
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """
    A product record.

    Lifecycle:
        Created via POST, read via list/get, fields replaced via PUT,
        removed via DELETE. No soft delete, versioning, or audit trail.
    """

    __tablename__ = "products"

    # Generic Uuid type: native UUID on PostgreSQL, CHAR(32) elsewhere
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    price: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0,
    )

    image: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}')>"

# Standard library imports
from datetime import UTC, datetime
import uuid

# Third-party imports
from sqlalchemy import TIMESTAMP, Column, String, text


def generate_id() -> str:
    return str(uuid.uuid4())


class UUIDTimeStampMixin:
    """A reusable mixin that:
    - Provides an opaque string primary key named 'id' (a UUID4 in canonical form)
    - Includes created_at and updated_at timestamps assigned by the database server

    This mixin is abstract and is not mapped as its own table.
    """

    __abstract__ = True  # Prevents SQLAlchemy from mapping this mixin as a separate table

    id = Column(String(36), primary_key=True, default=generate_id, index=True)

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=lambda: datetime.now(UTC),
    )

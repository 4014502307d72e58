"""Alumni model."""

from datetime import datetime

from sqlalchemy import String, Integer, DateTime, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Alumni(Base):
    __tablename__ = "alumni"
    __table_args__ = (UniqueConstraint("email", name="uq_alumni_email"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=True)
    graduation_year: Mapped[int] = mapped_column(Integer, nullable=True)
    degree: Mapped[str] = mapped_column(String(100), nullable=True)
    branch: Mapped[str] = mapped_column(String(100), nullable=True)
    current_company: Mapped[str] = mapped_column(String(150), nullable=True)
    current_position: Mapped[str] = mapped_column(String(150), nullable=True)
    location: Mapped[str] = mapped_column(String(200), nullable=True)

    # Both timestamps come from the database clock; updated_at is rewritten by
    # every UPDATE issued through SQLAlchemy.
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )


# Range of the 32-bit INTEGER id column; no row can have an id outside it.
ID_MIN = -(2 ** 31)
ID_MAX = 2 ** 31 - 1

# Columns the client may write; id and timestamps belong to storage.
MUTABLE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "graduation_year",
    "degree",
    "branch",
    "current_company",
    "current_position",
    "location",
)

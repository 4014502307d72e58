"""SQLAlchemy models package."""

from app.models.alumni import Alumni, ID_MAX, ID_MIN, MUTABLE_FIELDS

__all__ = ["Alumni", "ID_MAX", "ID_MIN", "MUTABLE_FIELDS"]

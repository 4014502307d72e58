"""Alumni record service: list/filter, get, create, update, delete, filter options.

Every statement is built from SQLAlchemy expressions, so client values always
travel as bound parameters. Storage errors are translated into the domain
errors from ``app.core.exceptions``; driver details are only logged.
"""

from typing import List

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import is_unique_violation
from app.core.exceptions import AlumniError, AlumniNotFound, DuplicateEmail, StorageError
from app.core.logging import logger
from app.models.alumni import Alumni, ID_MAX, ID_MIN
from app.schemas import AlumniFilters, AlumniPayload, AlumniResponse, FilterOptionsResponse


class AlumniService:
    """Operations on the alumni table over one request-scoped session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads ──────────────────────────────────────────────────────────────

    async def list_alumni(self, filters: AlumniFilters) -> List[AlumniResponse]:
        """Return alumni matching every supplied filter, newest first."""
        query = select(Alumni)
        if filters.degree is not None:
            query = query.where(Alumni.degree == filters.degree)
        if filters.graduation_year is not None:
            query = query.where(Alumni.graduation_year == filters.graduation_year)
        if filters.branch is not None:
            query = query.where(Alumni.branch == filters.branch)
        # id breaks ties between rows created within the same clock tick
        query = query.order_by(Alumni.created_at.desc(), Alumni.id.desc())

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            logger.error(f"Error fetching alumni: {exc}")
            raise StorageError("Failed to fetch alumni") from exc

        return [AlumniResponse.model_validate(row) for row in result.scalars().all()]

    async def get_alumni(self, alumni_id: int) -> AlumniResponse:
        self._require_storable_id(alumni_id)
        try:
            alumni = await self._fetch(alumni_id)
        except SQLAlchemyError as exc:
            logger.error(f"Error fetching alumni {alumni_id}: {exc}")
            raise StorageError("Failed to fetch alumni") from exc

        if alumni is None:
            raise AlumniNotFound()
        return AlumniResponse.model_validate(alumni)

    async def filter_options(self) -> FilterOptionsResponse:
        """Distinct non-null degrees, graduation years and branches."""
        degree_query = (
            select(Alumni.degree).distinct()
            .where(Alumni.degree.is_not(None))
            .order_by(Alumni.degree)
        )
        year_query = (
            select(Alumni.graduation_year).distinct()
            .where(Alumni.graduation_year.is_not(None))
            .order_by(Alumni.graduation_year.desc())
        )
        branch_query = (
            select(Alumni.branch).distinct()
            .where(Alumni.branch.is_not(None))
            .order_by(Alumni.branch)
        )

        try:
            degrees = (await self.db.execute(degree_query)).scalars().all()
            years = (await self.db.execute(year_query)).scalars().all()
            branches = (await self.db.execute(branch_query)).scalars().all()
        except SQLAlchemyError as exc:
            logger.error(f"Error fetching filter options: {exc}")
            raise StorageError("Failed to fetch filter options") from exc

        return FilterOptionsResponse(
            degrees=list(degrees),
            graduation_years=list(years),
            branches=list(branches),
        )

    # ─── Writes ─────────────────────────────────────────────────────────────

    async def create_alumni(self, payload: AlumniPayload) -> AlumniResponse:
        """Insert a record and return it as stored, with id and timestamps."""
        alumni = Alumni(**payload.model_dump())
        self.db.add(alumni)

        try:
            await self.db.flush()
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise self._write_error(exc, "Failed to create alumni") from exc

        try:
            # Re-read the row: id, created_at and updated_at are set by the database
            await self.db.refresh(alumni)
        except SQLAlchemyError as exc:
            logger.error(f"Error fetching created alumni {alumni.id}: {exc}")
            raise StorageError("Failed to fetch created alumni") from exc

        logger.info(f"Alumni created: {alumni.id} ({alumni.email})")
        return AlumniResponse.model_validate(alumni)

    async def update_alumni(self, alumni_id: int, payload: AlumniPayload) -> AlumniResponse:
        """Replace all mutable fields of a record; updated_at is refreshed by storage."""
        self._require_storable_id(alumni_id)
        statement = (
            update(Alumni)
            .where(Alumni.id == alumni_id)
            .values(**payload.model_dump())
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(statement)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise self._write_error(exc, "Failed to update alumni") from exc

        if result.rowcount == 0:
            raise AlumniNotFound()

        try:
            alumni = await self._fetch(alumni_id)
        except SQLAlchemyError as exc:
            logger.error(f"Error fetching updated alumni {alumni_id}: {exc}")
            raise StorageError("Failed to update alumni") from exc

        # Deleted between the UPDATE and the re-read
        if alumni is None:
            raise AlumniNotFound()

        logger.info(f"Alumni updated: {alumni_id}")
        return AlumniResponse.model_validate(alumni)

    async def delete_alumni(self, alumni_id: int) -> str:
        self._require_storable_id(alumni_id)
        statement = (
            delete(Alumni)
            .where(Alumni.id == alumni_id)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(statement)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(f"Error deleting alumni {alumni_id}: {exc}")
            raise StorageError("Failed to delete alumni") from exc

        if result.rowcount == 0:
            raise AlumniNotFound()

        logger.info(f"Alumni deleted: {alumni_id}")
        return "Alumni deleted successfully"

    # ─── Helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def _require_storable_id(alumni_id: int) -> None:
        """Ids the id column cannot hold match no row; drivers reject them outright."""
        if not ID_MIN <= alumni_id <= ID_MAX:
            raise AlumniNotFound()

    async def _fetch(self, alumni_id: int):
        result = await self.db.execute(
            select(Alumni)
            .where(Alumni.id == alumni_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _write_error(exc: SQLAlchemyError, message: str) -> AlumniError:
        """Map a failed INSERT/UPDATE to DuplicateEmail or a generic StorageError."""
        if isinstance(exc, IntegrityError) and is_unique_violation(exc, "email"):
            logger.warning(f"Duplicate email rejected: {exc.orig}")
            return DuplicateEmail()
        logger.error(f"{message}: {exc}")
        return StorageError(message)

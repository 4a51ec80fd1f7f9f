import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from research_oracle.exceptions import RepositoryException
from research_oracle.models.paper import Paper, PaperChunk
from research_oracle.schemas.corpus import YearCount
from research_oracle.schemas.paper import PaperSearchFilters

logger = logging.getLogger(__name__)


class PaperRepository:
    """Read-only queries against the papers and paper_chunks tables."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _query(self, name: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            # An aborted transaction would fail every later query in the request
            self.session.rollback()
            logger.error(f"Paper query {name} failed: {e}")
            raise RepositoryException(str(e.orig) if getattr(e, "orig", None) else str(e)) from e

    def get_by_id(self, paper_id: str) -> Optional[Paper]:
        stmt = select(Paper).where(Paper.id == paper_id)
        with self._query("get_by_id"):
            return self.session.scalar(stmt)

    def get_recent(self, limit: int = 4) -> List[Paper]:
        stmt = select(Paper).order_by(Paper.created_at.desc().nulls_last()).limit(limit)
        with self._query("get_recent"):
            return list(self.session.scalars(stmt))

    def get_by_entity(self, entity: str, limit: int = 10) -> List[Paper]:
        stmt = (
            select(Paper)
            .where(Paper.entities.contains([entity]))
            .order_by(Paper.pub_year.desc().nulls_last())
            .limit(limit)
        )
        with self._query("get_by_entity"):
            return list(self.session.scalars(stmt))

    def search(
        self, filters: PaperSearchFilters, limit: int = 20, offset: int = 0
    ) -> Tuple[List[Paper], int]:
        stmt = select(Paper)

        # ---- Text match on title, summary or any topic label ----
        if filters.query:
            pattern = f"%{filters.query}%"
            stmt = stmt.where(
                or_(
                    Paper.title.ilike(pattern),
                    Paper.summary.ilike(pattern),
                    cast(Paper.entities, String).ilike(pattern),
                )
            )

        # ---- Decade filter ----
        if filters.decade is not None:
            stmt = stmt.where(
                Paper.pub_year >= filters.decade,
                Paper.pub_year < filters.decade + 10,
            )

        # ---- Topic filter ----
        if filters.entity:
            stmt = stmt.where(Paper.entities.contains([filters.entity]))

        count_stmt = select(func.count()).select_from(stmt.subquery())
        stmt = stmt.order_by(Paper.pub_year.desc().nulls_last(), Paper.title)
        stmt = stmt.limit(limit).offset(offset)

        with self._query("search"):
            total = self.session.scalar(count_stmt) or 0
            return list(self.session.scalars(stmt)), total

    def count(
        self,
        year: Optional[int] = None,
        year_min: Optional[int] = None,
        year_max: Optional[int] = None,
        entity: Optional[str] = None,
    ) -> int:
        stmt = select(func.count(Paper.id))

        if year:
            stmt = stmt.where(Paper.pub_year == year)
        if year_min:
            stmt = stmt.where(Paper.pub_year >= year_min)
        if year_max:
            stmt = stmt.where(Paper.pub_year <= year_max)
        if entity:
            stmt = stmt.where(Paper.entities.contains([entity]))

        with self._query("count"):
            return self.session.scalar(stmt) or 0

    def count_chunks(self) -> int:
        stmt = select(func.count(PaperChunk.id))
        with self._query("count_chunks"):
            return self.session.scalar(stmt) or 0

    def year_bounds(self) -> Tuple[Optional[int], Optional[int]]:
        """Earliest and latest publication year, ignoring papers without one."""
        stmt = select(func.min(Paper.pub_year), func.max(Paper.pub_year)).where(
            Paper.pub_year.isnot(None)
        )
        with self._query("year_bounds"):
            row = self.session.execute(stmt).one()
        return row[0], row[1]

    def count_by_year(self) -> List[YearCount]:
        stmt = (
            select(Paper.pub_year, func.count(Paper.id))
            .where(Paper.pub_year.isnot(None))
            .group_by(Paper.pub_year)
            .order_by(Paper.pub_year)
        )
        with self._query("count_by_year"):
            rows = self.session.execute(stmt).all()
        return [YearCount(year=year, paper_count=count) for year, count in rows]

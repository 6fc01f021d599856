from typing import Any, List, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session


class BaseRepository:
    """Repositories share the unit of work's Session and never commit themselves."""

    def __init__(self, db: Session):
        self.db = db

    def fetch_one(self, stmt: Select) -> Optional[Any]:
        return self.db.execute(stmt).scalar_one_or_none()

    def fetch_all(self, stmt: Select) -> List[Any]:
        return list(self.db.execute(stmt).scalars().all())

    def count(self, stmt: Select) -> int:
        """Row count of a select, ignoring any limit/offset applied later."""
        return self.db.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()

    def add(self, instance):
        self.db.add(instance)
        self.db.flush()
        return instance

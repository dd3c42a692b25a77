# /blog_auto/services/database_helpers/generation_repository_sql.py

"""
Raw SQLAlchemy queries for the `generations` table. Soft-deleted rows are
invisible to every read in this module.
"""

from datetime import datetime, timezone
from typing import List, Dict, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func

from blog_auto.db.models.generation_models import Generation

RUNNING = "running"


class GenerationRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def _live(self):
        return self.db.query(Generation).filter(Generation.deleted_at.is_(None))

    def add_generation(self, record: Dict) -> Generation:
        """Creates a new Generation record in the database from a dictionary."""
        new_generation = Generation(**record)
        self.db.add(new_generation)
        self.db.commit()
        self.db.refresh(new_generation)
        return new_generation

    def get_generation(self, generation_id: str) -> Optional[Generation]:
        return self._live().filter(Generation.id == generation_id).first()

    def update_generation(self, generation_id: str, fields: Dict) -> bool:
        """Applies a partial update. Returns False when the row does not exist."""
        record = self._live().filter(Generation.id == generation_id).first()
        if not record:
            return False
        for key, value in fields.items():
            setattr(record, key, value)
        self.db.commit()
        return True

    def finalize_generation(self, generation_id: str, status: str, fields: Dict) -> bool:
        """
        Moves a job into a terminal status together with its final fields.
        Only a row that is still `running` is touched, so a terminal status is
        never overwritten.
        """
        values = dict(fields)
        values["status"] = status
        values.setdefault("completed_at", datetime.now(timezone.utc))
        updated = (
            self.db.query(Generation)
            .filter(Generation.id == generation_id, Generation.status == RUNNING)
            .update(values, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

    def list_generations(
        self,
        page: int,
        limit: int,
        search: Optional[str] = None,
        style: Optional[str] = None,
    ) -> Tuple[List[Generation], int]:
        """Returns one page of generations (newest first) and the total match count."""
        query = self._live()
        if search:
            query = query.filter(Generation.topic.ilike(f"%{search}%"))
        if style:
            query = query.filter(Generation.style == style)

        total = query.with_entities(func.count(Generation.id)).scalar() or 0
        rows = (
            query.order_by(Generation.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    def soft_delete_generation(self, generation_id: str) -> bool:
        """Marks a generation as deleted; it disappears from history and status reads."""
        record = self._live().filter(Generation.id == generation_id).first()
        if not record:
            return False
        record.deleted_at = datetime.now(timezone.utc)
        self.db.commit()
        return True

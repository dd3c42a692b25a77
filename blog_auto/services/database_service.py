# /blog_auto/services/database_service.py

from typing import List, Dict, Optional, Tuple, Generator
from sqlalchemy.orm import Session
from fastapi import Depends

# --- Core Database Setup ---
from blog_auto.db.database import get_db
from blog_auto.db.models.generation_models import Generation, StyleProfile

# --- Repository Imports ---
from .database_helpers.generation_repository_sql import GenerationRepositorySQL
from .database_helpers.style_profile_repository_sql import StyleProfileRepositorySQL


class DatabaseService:
    def __init__(self, db_session: Session):
        """
        Facade over the SQL repositories. Services talk to this class only,
        never to a Session directly.
        """
        self.generation_repo = GenerationRepositorySQL(db_session)
        self.session = db_session
        self.style_profile_repo = StyleProfileRepositorySQL(db_session)

    # --- GENERATION JOB METHODS (DELEGATED) ---
    def add_generation_record(self, record: Dict) -> Generation: return self.generation_repo.add_generation(record)
    def get_generation(self, generation_id: str) -> Optional[Generation]: return self.generation_repo.get_generation(generation_id)
    def update_generation_record(self, generation_id: str, fields: Dict) -> bool: return self.generation_repo.update_generation(generation_id, fields)
    def complete_generation(self, generation_id: str, fields: Dict) -> bool: return self.generation_repo.finalize_generation(generation_id, "completed", fields)
    def fail_generation(self, generation_id: str, fields: Dict) -> bool: return self.generation_repo.finalize_generation(generation_id, "failed", fields)
    def soft_delete_generation(self, generation_id: str) -> bool: return self.generation_repo.soft_delete_generation(generation_id)

    def list_generations(self, page: int, limit: int, search: Optional[str] = None, style: Optional[str] = None) -> Tuple[List[Generation], int]:
        return self.generation_repo.list_generations(page=page, limit=limit, search=search, style=style)

    def rollback(self) -> None:
        """Discards a half-finished transaction so the session can be reused."""
        self.session.rollback()

    # --- STYLE PROFILE METHODS (DELEGATED) ---
    def add_style_profile(self, record: Dict) -> StyleProfile: return self.style_profile_repo.add_profile(record)
    def get_style_profile(self, profile_id: str) -> Optional[StyleProfile]: return self.style_profile_repo.get_profile(profile_id)
    def get_all_style_profiles(self) -> List[StyleProfile]: return self.style_profile_repo.list_profiles()
    def delete_style_profile(self, profile_id: str) -> bool: return self.style_profile_repo.delete_profile(profile_id)


def get_db_service(db: Session = Depends(get_db)) -> Generator[DatabaseService, None, None]:
    """FastAPI dependency that provides a DatabaseService instance."""
    yield DatabaseService(db_session=db)

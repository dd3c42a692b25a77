# /blog_auto/services/database_helpers/style_profile_repository_sql.py

from typing import List, Dict, Optional
from sqlalchemy.orm import Session

from blog_auto.db.models.generation_models import StyleProfile


class StyleProfileRepositorySQL:
    def __init__(self, db_session: Session):
        self.db = db_session

    def add_profile(self, record: Dict) -> StyleProfile:
        new_profile = StyleProfile(**record)
        self.db.add(new_profile)
        self.db.commit()
        self.db.refresh(new_profile)
        return new_profile

    def get_profile(self, profile_id: str) -> Optional[StyleProfile]:
        return self.db.query(StyleProfile).filter(StyleProfile.id == profile_id).first()

    def list_profiles(self) -> List[StyleProfile]:
        """Most recently updated first."""
        return self.db.query(StyleProfile).order_by(StyleProfile.updated_at.desc()).all()

    def delete_profile(self, profile_id: str) -> bool:
        record = self.get_profile(profile_id)
        if record:
            self.db.delete(record)
            self.db.commit()
            return True
        return False

# /blog_auto/models/style_profile_model.py

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

class StyleProfileCreate(BaseModel):
    name: str
    description: str = ""
    samples: List[str] = Field(..., min_length=1, max_length=5)

    @field_validator('name')
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('프로필 이름을 입력해주세요.')
        return v

    @field_validator('samples')
    @classmethod
    def samples_must_have_text(cls, v: List[str]) -> List[str]:
        cleaned = [s.strip() for s in v if s and s.strip()]
        if not cleaned:
            raise ValueError('분석할 글 샘플을 1개 이상 입력해주세요.')
        return cleaned

class StyleProfileRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    profile: str
    sampleCount: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_orm_row(cls, row) -> "StyleProfileRecord":
        return cls(
            id=row.id, name=row.name, description=row.description,
            profile=row.profile, sampleCount=row.sample_count,
            createdAt=row.created_at, updatedAt=row.updated_at,
        )

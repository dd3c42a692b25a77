# /blog_auto/models/generation_model.py

from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List
from enum import Enum
from datetime import datetime

# --- Core Enumerations ---
class StyleId(str, Enum):
    CASUAL = "casual"
    INFORMATIVE = "informative"
    REVIEW = "review"
    FOOD_REVIEW = "food_review"
    MARKETING = "marketing"
    STORY = "story"

class LengthId(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

class GenerationMode(str, Enum):
    QUICK = "quick"
    QUALITY = "quality"

class GenerationStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

# --- API Contract Models ---

class GenerateRequest(BaseModel):
    """Body of POST /api/generate."""
    topic: str
    keywords: List[str] = Field(default_factory=list)
    style: StyleId = StyleId.CASUAL
    length: LengthId = LengthId.MEDIUM
    mode: GenerationMode = GenerationMode.QUICK
    additionalInfo: str = ""
    styleProfileId: Optional[str] = None
    generateImages: bool = False
    imageIds: List[str] = Field(default_factory=list, max_length=5)

    @field_validator('topic')
    @classmethod
    def topic_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('주제를 입력해주세요.')
        return v

    @field_validator('keywords')
    @classmethod
    def drop_blank_keywords(cls, v: List[str]) -> List[str]:
        return [k.strip() for k in v if k and k.strip()]

class GenerateAcceptedResponse(BaseModel):
    id: str
    status: GenerationStatus

class GenerationProgress(BaseModel):
    """Snapshot of a job's progress-store entry."""
    status: GenerationStatus
    progress: str
    error: Optional[str] = None

class GenerationRunningResponse(BaseModel):
    id: str
    status: GenerationStatus
    progress: str

class GenerationRecord(BaseModel):
    """The durable job record as returned to polling clients."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    topic: str
    keywords: List[str]
    style: StyleId
    length: LengthId
    mode: GenerationMode
    styleProfileId: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    charCount: Optional[int] = None
    readTime: Optional[int] = None
    headings: Optional[List[str]] = None
    seoScore: Optional[int] = None
    inputTokens: int = 0
    outputTokens: int = 0
    costUsd: float = 0.0
    durationSec: int = 0
    status: GenerationStatus
    error: Optional[str] = None
    createdAt: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    imageUrls: List[str] = Field(default_factory=list)
    progress: Optional[str] = None
    progressError: Optional[str] = None

    @classmethod
    def from_orm_row(cls, row, progress: Optional[str] = None, progress_error: Optional[str] = None) -> "GenerationRecord":
        """Maps the snake_case ORM columns onto the camelCase API contract."""
        return cls(
            id=row.id, topic=row.topic, keywords=row.keywords or [],
            style=row.style, length=row.length, mode=row.mode,
            styleProfileId=row.style_profile_id,
            title=row.title, content=row.content,
            charCount=row.char_count, readTime=row.read_time,
            headings=row.headings, seoScore=row.seo_score,
            inputTokens=row.input_tokens or 0, outputTokens=row.output_tokens or 0,
            costUsd=float(row.cost_usd or 0), durationSec=row.duration_sec or 0,
            status=row.status, error=row.error,
            createdAt=row.created_at, completedAt=row.completed_at,
            imageUrls=row.image_urls or [],
            progress=progress,
            progressError=progress_error,
        )

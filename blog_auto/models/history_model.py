# /blog_auto/models/history_model.py

from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from .generation_model import StyleId, LengthId, GenerationMode, GenerationStatus

class HistoryItem(BaseModel):
    """A generation as listed in the history view (no body text)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    topic: str
    keywords: List[str]
    style: StyleId
    length: LengthId
    mode: GenerationMode
    title: Optional[str] = None
    charCount: Optional[int] = None
    readTime: Optional[int] = None
    seoScore: Optional[int] = None
    status: GenerationStatus
    costUsd: float = 0.0
    durationSec: int = 0
    createdAt: Optional[datetime] = None

class HistoryResponse(BaseModel):
    """
    Defines the data contract for the GET /api/history response.
    """
    items: List[HistoryItem]
    total: int
    page: int
    limit: int
    totalPages: int

# /blog_auto/models/seo_model.py

from pydantic import BaseModel, Field
from typing import List
from enum import Enum

class SeoStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"

class SeoItem(BaseModel):
    name: str
    status: SeoStatus
    message: str
    score: int

class SeoAnalysis(BaseModel):
    score: int = 0
    maxScore: int = 100
    items: List[SeoItem] = Field(default_factory=list)

class ParsedPost(BaseModel):
    """Title/body/metrics extracted from a generated markdown post."""
    title: str
    body: str
    content: str
    charCount: int
    readTime: int
    headings: List[str]

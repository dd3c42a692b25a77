# /blog_auto/services/history_service.py

import math
from typing import Optional

from .database_service import DatabaseService
from ..models.history_model import HistoryItem, HistoryResponse

MAX_PAGE_SIZE = 50


def _to_history_item(row) -> HistoryItem:
    return HistoryItem(
        id=row.id, topic=row.topic, keywords=row.keywords or [],
        style=row.style, length=row.length, mode=row.mode,
        title=row.title, charCount=row.char_count, readTime=row.read_time,
        seoScore=row.seo_score, status=row.status,
        costUsd=float(row.cost_usd or 0), durationSec=row.duration_sec or 0,
        createdAt=row.created_at,
    )


def get_history(
    db: DatabaseService,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    style: Optional[str] = None,
) -> HistoryResponse:
    """
    One page of past generations, newest first. `search` matches the topic
    case-insensitively; `style` filters exactly.
    """
    if page < 1:
        raise ValueError("page must be 1 or greater.")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_SIZE}.")

    search = search.strip() if search else None
    rows, total = db.list_generations(page=page, limit=limit, search=search or None, style=style or None)
    return HistoryResponse(
        items=[_to_history_item(r) for r in rows],
        total=total,
        page=page,
        limit=limit,
        totalPages=math.ceil(total / limit) if total else 0,
    )


def delete_generation(db: DatabaseService, generation_id: str) -> bool:
    """Soft delete; the row stays in the table but drops out of every read."""
    return db.soft_delete_generation(generation_id)

# /blog_auto/routers/history_router.py

import logging
from fastapi import APIRouter, Depends, HTTPException, status, Response, Query
from typing import Optional

from ..models import history_model
from ..services import history_service
from ..services.database_service import DatabaseService, get_db_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",  # Maps to /api/history
    response_model=history_model.HistoryResponse,
    summary="Get Generation History"
)
def get_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=history_service.MAX_PAGE_SIZE),
    search: Optional[str] = None,
    style: Optional[str] = None,
    db: DatabaseService = Depends(get_db_service)
):
    try:
        return history_service.get_history(db=db, page=page, limit=limit, search=search, style=style)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Error fetching generation history: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred while fetching the generation history."
        )


@router.delete(
    "/{generation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a Generation Record",
    responses={404: {"description": "Generation record not found"}}
)
def delete_generation_record(
    generation_id: str,
    db: DatabaseService = Depends(get_db_service)
):
    if not history_service.delete_generation(db=db, generation_id=generation_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Generation record with ID {generation_id} not found.",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)

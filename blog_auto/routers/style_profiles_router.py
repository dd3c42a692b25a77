# /blog_auto/routers/style_profiles_router.py

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status, Response

from ..models import style_profile_model
from ..services.claude_service import ClaudeCliError
from ..services.style_service import StyleService, get_style_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[style_profile_model.StyleProfileRecord], summary="List style profiles")
def list_style_profiles(style_svc: StyleService = Depends(get_style_service)):
    return style_svc.list_profiles()


@router.post(
    "",
    response_model=style_profile_model.StyleProfileRecord,
    status_code=status.HTTP_201_CREATED,
    summary="Analyse sample posts into a new style profile",
)
async def create_style_profile(
    payload: style_profile_model.StyleProfileCreate,
    style_svc: StyleService = Depends(get_style_service),
):
    """Blocks for the duration of the analysis call (up to two minutes)."""
    try:
        return await style_svc.create_profile(payload)
    except ClaudeCliError as e:
        logger.error("Style analysis failed: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"스타일 분석 실패: {e}")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Error creating style profile: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while creating the style profile.",
        )


@router.delete(
    "/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a style profile",
    responses={404: {"description": "Style profile not found"}},
)
def delete_style_profile(profile_id: str, style_svc: StyleService = Depends(get_style_service)):
    if not style_svc.delete_profile(profile_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Style profile with ID {profile_id} not found.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# /blog_auto/routers/generate_router.py

"""
Job submission and status polling for blog post generation.

POST returns as soon as the job is admitted and persisted; the pipeline runs
as a background task and clients poll GET /{id} for progress.
"""

import logging
from typing import Union

from fastapi import APIRouter, Depends, HTTPException, status, BackgroundTasks

from ..models import generation_model
from ..services.generation_service import (
    GenerationService, GenerationCapacityError, get_generation_service, run_generation_in_background,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=generation_model.GenerateAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Start a blog post generation job",
    responses={429: {"description": "Another generation is already running"}},
)
def create_generation_job(
    payload: generation_model.GenerateRequest,
    background_tasks: BackgroundTasks,
    generation_svc: GenerationService = Depends(get_generation_service),
):
    try:
        job = generation_svc.create_generation_job(payload)
    except GenerationCapacityError as e:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.exception("Error creating generation job: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while creating the generation job.",
        )

    background_tasks.add_task(run_generation_in_background, job["id"], payload)
    return job


@router.get(
    "/{generation_id}",
    response_model=Union[generation_model.GenerationRecord, generation_model.GenerationRunningResponse],
    summary="Poll a generation job",
    responses={404: {"description": "Generation not found"}},
)
def get_generation_status(
    generation_id: str,
    generation_svc: GenerationService = Depends(get_generation_service),
):
    result = generation_svc.get_generation_status(generation_id)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="생성 기록을 찾을 수 없습니다.")
    return result

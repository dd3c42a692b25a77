# /blog_auto/services/generation_service.py

"""
This module defines the GenerationService, the orchestrator for the blog post
generation pipeline.

A job is admitted and persisted synchronously by `create_generation_job`, then
driven to a terminal state by `process_generation_job` running detached from
the request. The pipeline steps, in order:

    system prompt -> attached-image analysis -> draft -> quality refinement
    -> image prompts + Kling rendering -> SEO/post parsing -> finalize

Only the draft is fatal. Every other external step degrades: its failure is
logged and the pipeline continues with what it has. Progress is mirrored into
the in-memory GenerationStore for pollers; the `generations` row is the
durable record and is written exactly once on the way out. Persistence calls
made from the job run in a worker thread so pollers keep being served.
"""

import asyncio
import logging
import time
import uuid
from typing import Dict, Optional, Union

from fastapi import Depends

from .. import config
from ..db.database import SessionLocal
from ..models.generation_model import (
    GenerateRequest, GenerationMode, GenerationRecord, GenerationRunningResponse,
    GenerationStatus, StyleId,
)
from . import claude_service, kling_service, prompt_library, seo_analyzer
from .database_service import DatabaseService, get_db_service
from .generation_store import GenerationStore, generation_store
from .generation_helpers.image_analysis import analyze_attached_images
from .generation_helpers.image_generation import generate_post_images
from .generation_helpers.usage import UsageAccumulator

logger = logging.getLogger(__name__)

DRAFT_TIMEOUT_SECONDS = 180
REFINE_TIMEOUT_SECONDS = 180

CAPACITY_MESSAGE = "이미 생성 중인 글이 있습니다. 완료 후 다시 시도해주세요."
START_MESSAGE = "글 생성을 시작합니다..."
DONE_MESSAGE = "완료!"
FAILED_MESSAGE = "생성 실패"


class GenerationCapacityError(Exception):
    """Raised at admission when the running-job limit is already reached."""


class _StepTracker:
    """Numbers the visible steps of one job and publishes them to the store."""

    def __init__(self, store: GenerationStore, generation_id: str, total: int):
        self.store = store
        self.generation_id = generation_id
        self.total = total
        self.current = 0

    def advance(self, message: str) -> None:
        self.current += 1
        self.store.set_progress(
            self.generation_id, GenerationStatus.RUNNING, f"{message} ({self.current}/{self.total} 단계)"
        )


def count_pipeline_steps(request: GenerateRequest, kling_configured: bool) -> int:
    total = 2  # draft + finalize
    if request.imageIds:
        total += 1
    if request.mode == GenerationMode.QUALITY:
        total += 1
    if request.generateImages and kling_configured:
        total += 1
    return total


class GenerationService:
    def __init__(self, db: DatabaseService = Depends(get_db_service), store: GenerationStore = generation_store):
        self.db = db
        self.store = store

    # --- ADMISSION ---
    def create_generation_job(self, request: GenerateRequest) -> Dict:
        """
        Admits and persists a new job. Raises GenerationCapacityError before
        anything is written when the running limit is reached.
        """
        if self.store.get_running_count() >= config.MAX_CONCURRENT_GENERATIONS:
            raise GenerationCapacityError(CAPACITY_MESSAGE)

        generation_id = str(uuid.uuid4())
        self.db.add_generation_record({
            "id": generation_id,
            "topic": request.topic,
            "keywords": request.keywords,
            "style": request.style.value,
            "length": request.length.value,
            "mode": request.mode.value,
            "style_profile_id": request.styleProfileId,
            "status": GenerationStatus.RUNNING.value,
            "image_urls": [],
        })
        self.store.set_progress(generation_id, GenerationStatus.RUNNING, START_MESSAGE)
        logger.info("[Generate] Job %s admitted: topic=%r, mode=%s", generation_id, request.topic, request.mode.value)
        return {"id": generation_id, "status": GenerationStatus.RUNNING.value}

    # --- ORCHESTRATION ---
    async def process_generation_job(self, generation_id: str, request: GenerateRequest) -> None:
        """Drives one job to `completed` or `failed`. Never raises."""
        start = time.monotonic()
        usage = UsageAccumulator()
        try:
            await self._run_pipeline(generation_id, request, usage, start)
        except Exception as e:
            error_message = str(e) or e.__class__.__name__
            logger.exception("[Generate] Job %s failed: %s", generation_id, error_message)
            await self._record_failure(generation_id, error_message, round(time.monotonic() - start), usage)

    async def _run_pipeline(self, generation_id: str, request: GenerateRequest, usage: UsageAccumulator, start: float) -> None:
        images_enabled = request.generateImages and kling_service.is_kling_configured()
        if request.generateImages and not images_enabled:
            logger.info("[Generate] Image generation requested but Kling is not configured, skipping")
        steps = _StepTracker(self.store, generation_id, count_pipeline_steps(request, images_enabled))

        # 1. System prompt
        style_profile = await self._load_style_profile(request.styleProfileId)
        system_prompt = prompt_library.build_system_prompt(request.style, style_profile)

        # 2. Attached images (non-fatal)
        image_context = ""
        attached_refs = []
        if request.imageIds:
            steps.advance("이미지를 분석하고 있습니다...")
            attached = await analyze_attached_images(request.topic, request.imageIds, usage)
            image_context = attached.context
            attached_refs = attached.references

        # 3. Draft (fatal)
        quality = request.mode == GenerationMode.QUALITY
        steps.advance("초안을 생성하고 있습니다..." if quality else "글을 생성하고 있습니다...")
        build_user_prompt = (
            prompt_library.build_food_review_prompt
            if request.style == StyleId.FOOD_REVIEW
            else prompt_library.build_user_prompt
        )
        user_prompt = build_user_prompt(
            request.topic, request.keywords, request.length,
            additional_info=request.additionalInfo, image_context=image_context,
        )
        draft_result = await claude_service.run_claude_for_blog(system_prompt, user_prompt, timeout=DRAFT_TIMEOUT_SECONDS)
        usage.add(draft_result.usage)
        final_output = claude_service.ensure_output(draft_result)

        # 4. Quality refinement (non-fatal)
        if quality:
            steps.advance("글을 고도화하고 있습니다...")
            final_output = await self._refine(system_prompt, final_output, usage)

        # 5. Generated images (non-fatal)
        image_urls = list(attached_refs)
        if images_enabled:
            steps.advance("이미지를 생성하고 있습니다...")
            image_urls.extend(await generate_post_images(final_output, usage))

        # 6. Post-processing and finalize
        steps.advance("결과를 정리하고 있습니다...")
        parsed = seo_analyzer.parse_result(final_output)
        seo = seo_analyzer.analyze_seo(final_output, request.keywords)

        fields = {
            "title": parsed.title,
            "content": final_output,
            "char_count": parsed.charCount,
            "read_time": parsed.readTime,
            "headings": parsed.headings,
            "seo_score": seo.score,
            "image_urls": image_urls,
            "duration_sec": round(time.monotonic() - start),
            **usage.as_fields(),
        }
        if not await asyncio.to_thread(self.db.complete_generation, generation_id, fields):
            logger.warning("[Generate] Job %s was no longer running in the database; result not stored", generation_id)
        self.store.set_progress(generation_id, GenerationStatus.COMPLETED, DONE_MESSAGE)
        logger.info(
            "[Generate] Job %s completed: %d chars, seo=%d, images=%d, cost=$%.6f",
            generation_id, parsed.charCount, seo.score, len(image_urls), usage.cost_usd,
        )

    async def _load_style_profile(self, profile_id: Optional[str]) -> Optional[str]:
        if not profile_id:
            return None
        profile = await asyncio.to_thread(self.db.get_style_profile, profile_id)
        if profile is None:
            logger.warning("[Generate] Style profile %s not found, continuing without it", profile_id)
            return None
        return profile.profile

    async def _refine(self, system_prompt: str, draft: str, usage: UsageAccumulator) -> str:
        """Returns the refined post, or the draft unchanged if refinement fails."""
        try:
            result = await claude_service.run_claude_for_blog(
                system_prompt, prompt_library.build_quality_review_prompt(draft), timeout=REFINE_TIMEOUT_SECONDS
            )
            usage.add(result.usage)
            return claude_service.ensure_output(result)
        except Exception as e:
            logger.warning("[Generate] Quality refinement failed, keeping draft: %s", e)
            return draft

    async def _record_failure(self, generation_id: str, error_message: str, duration_sec: int, usage: UsageAccumulator) -> None:
        try:
            await asyncio.to_thread(self.db.rollback)
            await asyncio.to_thread(
                self.db.fail_generation, generation_id,
                {"error": error_message, "duration_sec": duration_sec, **usage.as_fields()},
            )
        except Exception:
            # The job is already failing; the store entry below still reports it.
            logger.exception("[Generate] Could not persist failure for job %s", generation_id)
        self.store.set_progress(generation_id, GenerationStatus.FAILED, FAILED_MESSAGE, error_message)

    # --- STATUS ---
    def get_generation_status(self, generation_id: str) -> Optional[Union[GenerationRunningResponse, GenerationRecord]]:
        """
        While the store reports the job running, only the progress message is
        returned. Otherwise the durable record is returned, annotated with the
        store's message when an entry is still retained.
        """
        progress = self.store.get_progress(generation_id)
        if progress is not None and progress.status == GenerationStatus.RUNNING:
            return GenerationRunningResponse(id=generation_id, status=progress.status, progress=progress.progress)

        row = self.db.get_generation(generation_id)
        if row is None:
            return None
        if progress is None:
            return GenerationRecord.from_orm_row(row)
        return GenerationRecord.from_orm_row(row, progress=progress.progress, progress_error=progress.error)


async def run_generation_in_background(generation_id: str, request: GenerateRequest) -> None:
    """BackgroundTasks entry point: the request's session is gone by now, so open a fresh one."""
    db_session = SessionLocal()
    try:
        service = GenerationService(db=DatabaseService(db_session))
        await service.process_generation_job(generation_id, request)
    finally:
        db_session.close()


def get_generation_service(db: DatabaseService = Depends(get_db_service)):
    return GenerationService(db=db)

# /blog_auto/services/style_service.py

"""
Style profiles: a handful of the writer's existing posts are analysed once by
the LLM and the resulting instruction block is stored for reuse. The
orchestrator appends it to the system prompt of any job that references it.
"""

import logging
import re
import uuid
from typing import List

from fastapi import Depends

from . import claude_service, prompt_library
from .database_service import DatabaseService, get_db_service
from ..models.style_profile_model import StyleProfileCreate, StyleProfileRecord

logger = logging.getLogger(__name__)

STYLE_ANALYSIS_TIMEOUT_SECONDS = 120
_CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?([\s\S]*?)\n?```\s*$")


def strip_code_fence(text: str) -> str:
    """Removes a single fence wrapping the whole output, if present."""
    text = text.strip()
    match = _CODE_FENCE.match(text)
    return match.group(1).strip() if match else text


class StyleService:
    def __init__(self, db: DatabaseService = Depends(get_db_service)):
        self.db = db

    async def create_profile(self, payload: StyleProfileCreate) -> StyleProfileRecord:
        """Runs the analysis and stores the profile. ClaudeCliError propagates."""
        logger.info("[Style] Analysing %d sample(s) for profile %r", len(payload.samples), payload.name)
        result = await claude_service.run_claude(
            prompt_library.build_style_analysis_prompt(payload.samples),
            timeout=STYLE_ANALYSIS_TIMEOUT_SECONDS,
        )
        profile_text = strip_code_fence(claude_service.ensure_output(result))

        new_profile = self.db.add_style_profile({
            "id": str(uuid.uuid4()),
            "name": payload.name,
            "description": payload.description,
            "profile": profile_text,
            "sample_count": len(payload.samples),
        })
        return StyleProfileRecord.from_orm_row(new_profile)

    def list_profiles(self) -> List[StyleProfileRecord]:
        return [StyleProfileRecord.from_orm_row(p) for p in self.db.get_all_style_profiles()]

    def delete_profile(self, profile_id: str) -> bool:
        return self.db.delete_style_profile(profile_id)


def get_style_service(db: DatabaseService = Depends(get_db_service)):
    return StyleService(db=db)

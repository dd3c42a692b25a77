# /blog_auto/services/generation_helpers/image_analysis.py

"""
Specialist helpers for the attached-image step of the generation pipeline:
resolving user-supplied image identifiers to files, asking Claude (vision)
to describe them, and turning the answer into a block for the writing prompt.

Image identifiers come from the client. They are reduced to a fixed character
whitelist before any path is built from them.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Dict

from ... import config
from .. import claude_service, prompt_library
from .usage import UsageAccumulator

logger = logging.getLogger(__name__)

VISION_TIMEOUT_SECONDS = 120
ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
IMAGE_URL_PREFIX = "/api/images/"

_UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9-]")
_EXTENSION_SUFFIX = re.compile(r"\.(jpg|jpeg|png|webp)$", re.IGNORECASE)
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")
MAX_ID_LENGTH = 64


@dataclass
class AttachedImages:
    context: str = ""
    references: List[str] = field(default_factory=list)


# --- File resolution ---

def sanitize_image_id(image_id: str) -> Optional[str]:
    """Strips a known extension and every character outside [a-zA-Z0-9-]."""
    if not isinstance(image_id, str):
        return None
    stem = _EXTENSION_SUFFIX.sub("", image_id.strip())
    safe = _UNSAFE_ID_CHARS.sub("", stem)[:MAX_ID_LENGTH]
    return safe or None


def resolve_uploaded_image(image_id: str, upload_dir: Optional[str] = None) -> Optional[Path]:
    """Returns the stored file for an identifier by probing the allowed extensions."""
    safe_id = sanitize_image_id(image_id)
    if not safe_id:
        return None
    base = Path(upload_dir or config.UPLOAD_DIR)
    for ext in ALLOWED_EXTENSIONS:
        candidate = base / f"{safe_id}{ext}"
        if candidate.is_file():
            return candidate
    return None


def image_reference(path: Path) -> str:
    return f"{IMAGE_URL_PREFIX}{path.name}"


# --- Vision output parsing ---

def extract_json_array(text: str) -> List:
    """
    Finds the outermost `[...]` in the model output (which may be fenced or
    wrapped in prose) and parses it. Raises ValueError when there is none.
    """
    match = _JSON_ARRAY.search(text or "")
    if not match:
        raise ValueError("No JSON array found in image analysis output")
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, list):
        raise ValueError("Image analysis output is not a JSON array")
    return parsed


def _analysis_for(index: int, analyses: List) -> Dict:
    for item in analyses:
        if isinstance(item, dict) and item.get("index") == index:
            return item
    if index - 1 < len(analyses) and isinstance(analyses[index - 1], dict):
        return analyses[index - 1]
    return {}


def build_image_context(references: List[str], analyses: List) -> str:
    lines = [
        "## 첨부 이미지 분석",
        "아래 이미지들을 글 내용과 어울리는 위치에 `![설명](경로)` 마크다운으로 삽입해주세요.",
    ]
    for i, ref in enumerate(references, start=1):
        item = _analysis_for(i, analyses)
        lines.append("")
        lines.append(f"### 이미지 {i}")
        lines.append(f"- 경로: {ref}")
        lines.append(f"- 설명: {item.get('description') or '설명 없음'}")
        if item.get("placement"):
            lines.append(f"- 추천 배치: {item['placement']}")
    return "\n".join(lines)


def build_fallback_image_context(references: List[str]) -> str:
    lines = [
        "## 첨부 이미지",
        "아래 이미지를 글의 적절한 위치에 `![설명](경로)` 마크다운으로 배치해주세요.",
    ]
    lines.extend(f"- 이미지 {i}: {ref}" for i, ref in enumerate(references, start=1))
    return "\n".join(lines)


# --- Step entry point ---

async def analyze_attached_images(topic: str, image_ids: List[str], usage: UsageAccumulator) -> AttachedImages:
    """
    Never raises: any vision or parse failure degrades to a block that just
    lists the image references for manual placement.
    """
    paths = []
    for image_id in image_ids:
        path = resolve_uploaded_image(image_id)
        if path is None:
            logger.warning("[Generate] Attached image not found or invalid id: %r", image_id)
            continue
        paths.append(path)

    if not paths:
        return AttachedImages()

    references = [image_reference(p) for p in paths]
    prompt = prompt_library.build_image_analysis_prompt(topic, len(paths))
    try:
        result = await claude_service.run_claude_with_images(
            prompt, [str(p) for p in paths], timeout=VISION_TIMEOUT_SECONDS
        )
        usage.add(result.usage)
        analyses = extract_json_array(claude_service.ensure_output(result))
    except Exception as e:
        logger.warning("[Generate] Image analysis failed, using fallback context: %s", e)
        return AttachedImages(context=build_fallback_image_context(references), references=references)

    return AttachedImages(context=build_image_context(references, analyses), references=references)

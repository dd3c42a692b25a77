# /blog_auto/services/generation_helpers/image_generation.py

import logging
import re
from typing import List

from .. import claude_service, kling_service, prompt_library
from .usage import UsageAccumulator

logger = logging.getLogger(__name__)

IMAGE_PROMPT_TIMEOUT_SECONDS = 60
IMAGE_PROMPT_COUNT = 2
_IMAGE_PROMPT_TAG = re.compile(r"\[IMAGE_PROMPT_\d+\]\s*(.+)")


def parse_image_prompts(text: str) -> List[str]:
    """Pulls the `[IMAGE_PROMPT_n] ...` lines out of the model output, in order."""
    return [m.strip() for m in _IMAGE_PROMPT_TAG.findall(text or "") if m.strip()]


async def generate_post_images(post: str, usage: UsageAccumulator, count: int = IMAGE_PROMPT_COUNT) -> List[str]:
    """
    Asks Claude for English image prompts describing the post, then renders
    each one with Kling, one after another. Failures are logged and skipped;
    whatever URLs were produced are returned.
    """
    try:
        result = await claude_service.run_claude(
            prompt_library.build_image_prompt_request(post, count),
            timeout=IMAGE_PROMPT_TIMEOUT_SECONDS,
        )
        usage.add(result.usage)
        prompts = parse_image_prompts(claude_service.ensure_output(result))[:count]
    except Exception as e:
        logger.warning("[Generate] Image prompt generation failed, skipping images: %s", e)
        return []

    if not prompts:
        logger.warning("[Generate] No image prompts found in model output, skipping images")
        return []

    image_urls: List[str] = []
    # Sequential on purpose: the provider rate-limits concurrent tasks.
    for i, prompt in enumerate(prompts, start=1):
        try:
            generated = await kling_service.generate_image(prompt)
            image_urls.extend(generated.image_urls)
        except Exception as e:
            logger.warning("[Generate] Image %d/%d failed: %s", i, len(prompts), e)
    return image_urls

# /blog_auto/services/kling_service.py

"""
Kling image generation. One logical call (`generate_image`) hides the
provider's submit-then-poll protocol:

    POST {base}/images/generations          -> data.task_id
    GET  {base}/images/generations/{task}   -> data.task_status in
                                               submitted|processing|succeed|failed

Requests are authenticated with a short-lived HS256 JWT built from the
access/secret key pair. The token is cached and reused until it is within
TOKEN_REFRESH_BUFFER_SECONDS of expiry.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
import jwt

from .. import config

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_SECONDS = 1800
TOKEN_REFRESH_BUFFER_SECONDS = 300
TOKEN_NOT_BEFORE_SKEW_SECONDS = 5

POLL_INTERVAL_SECONDS = 3.0
POLL_MAX_WAIT_SECONDS = 60.0
REQUEST_TIMEOUT_SECONDS = 30.0

DEFAULT_ASPECT_RATIO = "16:9"  # blog cover image


class KlingError(Exception):
    """Any failure talking to the image API: config, transport, provider or timeout."""


@dataclass
class KlingImageResult:
    task_id: str
    image_urls: List[str] = field(default_factory=list)


def is_kling_configured() -> bool:
    """Pure check: both credentials are present."""
    return bool(config.KLING_ACCESS_KEY and config.KLING_SECRET_KEY)


# --- Auth ---

_cached_token: Optional[str] = None
_token_expiry: int = 0


def _generate_jwt(now: Optional[int] = None) -> str:
    global _cached_token, _token_expiry
    now = int(time.time()) if now is None else now

    if _cached_token and _token_expiry > now + TOKEN_REFRESH_BUFFER_SECONDS:
        return _cached_token

    payload = {
        "iss": config.KLING_ACCESS_KEY,
        "exp": now + TOKEN_LIFETIME_SECONDS,
        "nbf": now - TOKEN_NOT_BEFORE_SKEW_SECONDS,
        "iat": now,
    }
    _cached_token = jwt.encode(payload, config.KLING_SECRET_KEY, algorithm="HS256", headers={"typ": "JWT"})
    _token_expiry = now + TOKEN_LIFETIME_SECONDS
    return _cached_token


def reset_token_cache() -> None:
    global _cached_token, _token_expiry
    _cached_token = None
    _token_expiry = 0


# --- Protocol ---

def _json_or_error(response: httpx.Response, what: str) -> dict:
    if response.status_code >= 400:
        raise KlingError(f"Kling {what} error {response.status_code}: {response.text}")
    try:
        return response.json()
    except ValueError as e:
        raise KlingError(f"Kling {what} returned invalid JSON: {e}") from e


async def _create_image_task(
    client: httpx.AsyncClient,
    prompt: str,
    model: str,
    count: int,
    aspect_ratio: str,
    negative_prompt: Optional[str],
) -> str:
    body = {
        "model_name": model,
        "prompt": prompt,
        "n": count,
        "aspect_ratio": aspect_ratio,
    }
    if negative_prompt:
        body["negative_prompt"] = negative_prompt

    response = await client.post(
        "/images/generations",
        json=body,
        headers={"Authorization": f"Bearer {_generate_jwt()}"},
    )
    payload = _json_or_error(response, "API")
    if payload.get("code") != 0:
        raise KlingError(f"Kling API error code {payload.get('code')}: {payload.get('message') or 'unknown'}")

    task_id = (payload.get("data") or {}).get("task_id")
    if not task_id:
        raise KlingError("Kling API response did not include a task_id")
    return task_id


async def _poll_image_result(
    client: httpx.AsyncClient,
    task_id: str,
    max_wait: float = POLL_MAX_WAIT_SECONDS,
    interval: float = POLL_INTERVAL_SECONDS,
) -> List[str]:
    start = time.monotonic()
    while time.monotonic() - start < max_wait:
        response = await client.get(
            f"/images/generations/{task_id}",
            headers={"Authorization": f"Bearer {_generate_jwt()}"},
        )
        data = _json_or_error(response, "poll").get("data") or {}
        status = data.get("task_status")

        if status == "succeed":
            images = (data.get("task_result") or {}).get("images") or []
            return [img["url"] for img in images if img.get("url")]
        if status == "failed":
            raise KlingError(f"Kling image generation failed: {data.get('task_status_msg') or 'unknown'}")

        await asyncio.sleep(interval)

    raise KlingError(f"Kling image generation timeout ({max_wait:g}s)")


async def generate_image(
    prompt: str,
    model: Optional[str] = None,
    aspect_ratio: str = DEFAULT_ASPECT_RATIO,
    count: int = 1,
    negative_prompt: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> KlingImageResult:
    """Submits one generation task and waits for its image URLs."""
    if not is_kling_configured():
        raise KlingError("Kling API가 설정되지 않았습니다. KLING_ACCESS_KEY, KLING_SECRET_KEY를 확인해주세요.")

    model = model or config.KLING_MODEL
    logger.info("[Kling] Generating image: model=%s, prompt=%s...", model, prompt[:80])

    try:
        async with httpx.AsyncClient(
            base_url=config.KLING_API_BASE,
            timeout=REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        ) as client:
            task_id = await _create_image_task(client, prompt, model, count, aspect_ratio, negative_prompt)
            logger.info("[Kling] Task created: %s", task_id)
            image_urls = await _poll_image_result(client, task_id)
    except httpx.HTTPError as e:
        raise KlingError(f"Kling request failed: {e}") from e

    logger.info("[Kling] Done: %d image(s) generated", len(image_urls))
    return KlingImageResult(task_id=task_id, image_urls=image_urls)

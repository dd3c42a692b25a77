# /blog_auto/services/claude_service.py

"""
Thin wrapper around the `claude` CLI. One call spawns one process, waits for
it to exit (or for the timeout to kill it) and normalises what it printed into
a `ClaudeResult`. Nothing here retries.

Two wire modes:
  * text:   `claude -p <prompt> --output-format json` -> one JSON document.
  * vision: `claude --input-format stream-json --output-format stream-json`
            with a single user message (base64 images + text) on stdin
            -> one JSON object per line; the `type == "result"` line wins.
"""

import asyncio
import base64
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from ..config import CLAUDE_BIN

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 180  # blog drafting: 3 minutes
DEFAULT_MAX_TURNS = 1

MEDIA_TYPES = {
    ".png": "image/png",
    ".webp": "image/webp",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


@dataclass
class ClaudeUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0
    cost_usd: float = 0.0


@dataclass
class ClaudeResult:
    output: str
    stderr: str
    exit_code: int
    duration_sec: int
    usage: ClaudeUsage = field(default_factory=ClaudeUsage)

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and bool(self.output)


class ClaudeCliError(Exception):
    """The CLI exited non-zero or produced no output."""


def ensure_output(result: ClaudeResult) -> str:
    """Returns the output text, or raises with the captured diagnostic."""
    if not result.ok:
        raise ClaudeCliError(result.stderr.strip() or "Claude CLI 응답 없음")
    return result.output


# --- Output normalisation ---

def _as_int(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _usage_from(envelope: dict) -> ClaudeUsage:
    usage = ClaudeUsage()
    raw = envelope.get("usage")
    if isinstance(raw, dict):
        usage.input_tokens = _as_int(raw.get("input_tokens"))
        usage.output_tokens = _as_int(raw.get("output_tokens"))
        usage.cache_creation_tokens = _as_int(raw.get("cache_creation_input_tokens"))
        usage.cache_read_tokens = _as_int(raw.get("cache_read_input_tokens"))
    cost = envelope.get("total_cost_usd")
    if isinstance(cost, (int, float)) and not isinstance(cost, bool):
        usage.cost_usd = float(cost)
    return usage


def parse_json_output(stdout: str) -> Tuple[str, ClaudeUsage]:
    """Normalises `--output-format json`. Unparsable output is returned verbatim."""
    try:
        envelope = json.loads(stdout)
    except ValueError:
        logger.warning("[Claude] JSON parse failed, using raw stdout as output")
        return stdout, ClaudeUsage()
    if not isinstance(envelope, dict):
        return stdout, ClaudeUsage()

    output = stdout
    result = envelope.get("result")
    if result is not None:
        output = result if isinstance(result, str) else json.dumps(result, ensure_ascii=False)
    elif envelope.get("type") == "result":
        # e.g. error_max_turns: the run ended without a final answer.
        logger.warning(
            "[Claude] Result subtype: %s, num_turns: %s",
            envelope.get("subtype", "unknown"), envelope.get("num_turns", "?"),
        )
        output = ""
    return output, _usage_from(envelope)


def parse_stream_json_output(stdout: str) -> Tuple[str, ClaudeUsage]:
    """Normalises `--output-format stream-json` (one JSON object per line)."""
    output = ""
    usage = ClaudeUsage()
    parsed_any = False
    for line in stdout.splitlines():
        if not line.strip():
            continue
        try:
            event = json.loads(line)
        except ValueError:
            continue
        parsed_any = True
        if isinstance(event, dict) and event.get("type") == "result":
            output = event.get("result") or ""
            usage = _usage_from(event)

    if not parsed_any and stdout.strip():
        logger.warning("[Claude] Vision: stream-json parse failed, using raw stdout")
        return stdout, ClaudeUsage()
    return output, usage


# --- Process plumbing ---

async def _execute(args: List[str], stdin_data: Optional[bytes], timeout: float) -> Tuple[str, str, int]:
    """
    Spawns the CLI and collects stdout/stderr until exit. On timeout the
    process is killed and whatever it printed so far is returned with a
    non-zero exit code. Spawn failures (e.g. missing binary) propagate.
    """
    proc = await asyncio.create_subprocess_exec(
        CLAUDE_BIN, *args,
        stdin=asyncio.subprocess.PIPE if stdin_data is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    # The readers are never cancelled, so output printed before a timeout survives the kill.
    stdout_reader = asyncio.create_task(proc.stdout.read())
    stderr_reader = asyncio.create_task(proc.stderr.read())

    async def feed_and_wait():
        if stdin_data is not None:
            proc.stdin.write(stdin_data)
            try:
                await proc.stdin.drain()
            except (BrokenPipeError, ConnectionResetError) as e:
                logger.warning("[Claude] CLI closed stdin early: %s", e)
            proc.stdin.close()
        return await proc.wait()

    timed_out = False
    try:
        await asyncio.wait_for(feed_and_wait(), timeout=timeout)
    except asyncio.TimeoutError:
        timed_out = True
        proc.kill()
        await proc.wait()
    stdout_b, stderr_b = await asyncio.gather(stdout_reader, stderr_reader)

    stdout = (stdout_b or b"").decode("utf-8", errors="replace")
    stderr = (stderr_b or b"").decode("utf-8", errors="replace")
    if timed_out:
        stderr = (stderr + f"\nClaude CLI timed out after {timeout:g}s").strip()

    # A signal-terminated process has no meaningful exit status.
    code = proc.returncode
    exit_code = code if code is not None and code >= 0 and not timed_out else 1
    return stdout, stderr, exit_code


# --- Public API ---

async def run_claude(prompt: str, max_turns: int = DEFAULT_MAX_TURNS, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> ClaudeResult:
    """Text-only call with `--output-format json`."""
    start = time.monotonic()
    logger.info("[Claude] Starting CLI, prompt length=%d, maxTurns=%d", len(prompt), max_turns)

    args = ["-p", prompt, "--output-format", "json", "--max-turns", str(max_turns)]
    stdout, stderr, exit_code = await _execute(args, None, timeout)

    duration = round(time.monotonic() - start)
    logger.info(
        "[Claude] Finished: exitCode=%d, stdout=%dch, stderr=%dch, duration=%ds",
        exit_code, len(stdout), len(stderr), duration,
    )
    if stderr:
        logger.info("[Claude] stderr: %s", stderr[:500])

    output, usage = parse_json_output(stdout)
    logger.info("[Claude] Usage: in=%d, out=%d, cost=$%.6f", usage.input_tokens, usage.output_tokens, usage.cost_usd)
    return ClaudeResult(output=output, stderr=stderr, exit_code=exit_code, duration_sec=duration, usage=usage)


def _build_vision_message(prompt: str, images: List[Tuple[bytes, str]]) -> bytes:
    content_blocks = [
        {
            "type": "image",
            "source": {"type": "base64", "media_type": media_type, "data": base64.b64encode(data).decode("ascii")},
        }
        for data, media_type in images
    ]
    content_blocks.append({"type": "text", "text": prompt})
    message = {"type": "user", "message": {"role": "user", "content": content_blocks}}
    return (json.dumps(message, ensure_ascii=False) + "\n").encode("utf-8")


async def run_claude_with_images(
    prompt: str,
    image_paths: List[str],
    max_turns: int = DEFAULT_MAX_TURNS,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ClaudeResult:
    """Vision call: every image plus the prompt go in one stream-json user message."""
    start = time.monotonic()
    logger.info("[Claude] Starting vision CLI, images=%d, prompt length=%d", len(image_paths), len(prompt))

    images = []
    for path in image_paths:
        data = await asyncio.to_thread(Path(path).read_bytes)
        images.append((data, MEDIA_TYPES.get(Path(path).suffix.lower(), "image/jpeg")))

    args = [
        "--input-format", "stream-json",
        "--output-format", "stream-json",
        "--verbose",
        "--max-turns", str(max_turns),
    ]
    stdout, stderr, exit_code = await _execute(args, _build_vision_message(prompt, images), timeout)

    duration = round(time.monotonic() - start)
    logger.info("[Claude] Vision finished: exitCode=%d, stdout=%dch, duration=%ds", exit_code, len(stdout), duration)

    output, usage = parse_stream_json_output(stdout)
    logger.info("[Claude] Vision usage: in=%d, out=%d, cost=$%.6f", usage.input_tokens, usage.output_tokens, usage.cost_usd)
    return ClaudeResult(output=output, stderr=stderr, exit_code=exit_code, duration_sec=duration, usage=usage)


async def run_claude_for_blog(
    system_prompt: str,
    user_prompt: str,
    max_turns: int = DEFAULT_MAX_TURNS,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ClaudeResult:
    """Blog drafting call: the system prompt rides along in a `<system>` block."""
    full_prompt = f"<system>\n{system_prompt}\n</system>\n\n{user_prompt}"
    return await run_claude(full_prompt, max_turns=max_turns, timeout=timeout)

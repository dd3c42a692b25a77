# /blog_auto/services/seo_analyzer.py

"""
SEO scoring and post parsing for generated markdown. Everything here is a pure
function of its inputs: no I/O, no module state.

Rubric (max 100):
    title length 10/5/0, keyword in title 10/5, text length 20/10,
    `##` headings 15/8/0, keyword density 15/8/0, paragraphs 10/5,
    emoji 10/5 (no item when there are none).
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from ..models.seo_model import SeoAnalysis, SeoItem, SeoStatus, ParsedPost

TITLE_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
HEADING_RE = re.compile(r"^##\s+(.+)$", re.MULTILINE)
STRIP_RE = re.compile(r"[#\s]")
PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")
EMOJI_RE = re.compile("[\U0001F300-\U0001F9FF]")

CHARS_PER_MINUTE = 500
DEFAULT_TITLE = "제목 없음"


def _extract_title(content: str) -> str:
    match = TITLE_RE.search(content)
    return match.group(1) if match else ""


def count_chars(content: str) -> int:
    """Length of the text with `#` markers and all whitespace removed."""
    return len(STRIP_RE.sub("", content))


def _round_one_decimal(value: float) -> float:
    # Half-up on the exact binary value, matching how the score is displayed.
    return float(Decimal(value).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _keyword_density(content: str, keywords: List[str], char_count: int) -> float:
    content_lower = content.lower()
    occurrences = sum(content_lower.count(k.lower()) for k in keywords if k)
    if char_count == 0:
        return math.inf if occurrences else 0.0
    return _round_one_decimal(occurrences / (char_count / 100))


def _format_density(density: float) -> str:
    return "∞" if math.isinf(density) else f"{density:g}"


def analyze_seo(content: str, keywords: Optional[List[str]] = None) -> SeoAnalysis:
    keywords = [k for k in (keywords or []) if k]
    analysis = SeoAnalysis()

    def add(name: str, status: SeoStatus, message: str, score: int):
        analysis.items.append(SeoItem(name=name, status=status, message=message, score=score))
        analysis.score += score

    # Title length
    title = _extract_title(content)
    if 10 <= len(title) <= 60:
        add("제목 길이", SeoStatus.GOOD, f"적절한 길이 ({len(title)}자)", 10)
    elif len(title) > 0:
        add("제목 길이", SeoStatus.WARNING, f"{len(title)}자 (10-60자 권장)", 5)
    else:
        add("제목 길이", SeoStatus.ERROR, "제목이 없습니다", 0)

    # Keyword in title
    if keywords:
        title_lower = title.lower()
        if any(k.lower() in title_lower for k in keywords):
            add("제목 키워드", SeoStatus.GOOD, "키워드가 제목에 포함됨", 10)
        else:
            add("제목 키워드", SeoStatus.WARNING, "제목에 키워드 추가 권장", 5)

    # Text length
    char_count = count_chars(content)
    if char_count >= 500:
        add("본문 길이", SeoStatus.GOOD, f"충분한 길이 ({char_count}자)", 20)
    else:
        add("본문 길이", SeoStatus.WARNING, f"{char_count}자 (500자 이상 권장)", 10)

    # Sub-headings
    heading_count = len(HEADING_RE.findall(content))
    if heading_count >= 3:
        add("구조화", SeoStatus.GOOD, f"소제목 {heading_count}개 사용", 15)
    elif heading_count > 0:
        add("구조화", SeoStatus.WARNING, f"소제목 {heading_count}개 (3개 이상 권장)", 8)
    else:
        add("구조화", SeoStatus.ERROR, "소제목 없음", 0)

    # Keyword density, occurrences per 100 chars
    if keywords:
        density = _keyword_density(content, keywords, char_count)
        if 1 <= density <= 3:
            add("키워드 밀도", SeoStatus.GOOD, f"{_format_density(density)}% (적절)", 15)
        elif density > 0:
            add("키워드 밀도", SeoStatus.WARNING, f"{_format_density(density)}% (1-3% 권장)", 8)
        else:
            add("키워드 밀도", SeoStatus.ERROR, "키워드 미포함", 0)

    # Paragraphs
    paragraphs = [p for p in PARAGRAPH_SPLIT_RE.split(content) if p.strip()]
    if len(paragraphs) >= 5:
        add("문단 구분", SeoStatus.GOOD, f"{len(paragraphs)}개 문단", 10)
    else:
        add("문단 구분", SeoStatus.WARNING, f"{len(paragraphs)}개 문단 (5개 이상 권장)", 5)

    # Emoji
    emoji_count = len(EMOJI_RE.findall(content))
    if 3 <= emoji_count <= 10:
        add("이모지 사용", SeoStatus.GOOD, f"{emoji_count}개 (적절)", 10)
    elif emoji_count > 0:
        add("이모지 사용", SeoStatus.INFO, f"{emoji_count}개", 5)

    return analysis


def parse_result(content: str) -> ParsedPost:
    """Splits a generated post into title and body and derives its reading metrics."""
    match = TITLE_RE.search(content)
    title = match.group(1).strip() if match else DEFAULT_TITLE
    body = TITLE_RE.sub("", content, count=1).strip()
    char_count = count_chars(content)
    return ParsedPost(
        title=title,
        body=body,
        content=content,
        charCount=char_count,
        readTime=math.ceil(char_count / CHARS_PER_MINUTE),
        headings=HEADING_RE.findall(content),
    )

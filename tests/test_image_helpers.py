# /tests/test_image_helpers.py

import pytest
from unittest.mock import AsyncMock

from blog_auto.services import claude_service
from blog_auto.services.claude_service import ClaudeResult
from blog_auto.services.generation_helpers import image_analysis
from blog_auto.services.generation_helpers.image_generation import parse_image_prompts
from blog_auto.services.generation_helpers.usage import UsageAccumulator


@pytest.mark.parametrize("raw, expected", [
    ("3f2a9c1e-1b2c-4d5e-8f90-123456789abc", "3f2a9c1e-1b2c-4d5e-8f90-123456789abc"),
    ("photo.JPG", "photo"),
    ("../../etc/passwd", "etcpasswd"),
    ("a/b\\c d", "abcd"),
    ("../..", None),
    ("", None),
])
def test_sanitize_image_id(raw, expected):
    assert image_analysis.sanitize_image_id(raw) == expected


def test_resolve_probes_allowed_extensions(tmp_path):
    (tmp_path / "img-1.webp").write_bytes(b"x")
    (tmp_path / "img-2.gif").write_bytes(b"x")
    assert image_analysis.resolve_uploaded_image("img-1", str(tmp_path)) == tmp_path / "img-1.webp"
    assert image_analysis.resolve_uploaded_image("img-2", str(tmp_path)) is None


def test_resolve_never_leaves_upload_dir(tmp_path):
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    (tmp_path / "secret.png").write_bytes(b"x")
    assert image_analysis.resolve_uploaded_image("../secret", str(uploads)) is None


def test_extract_json_array_from_fenced_output():
    text = "분석 결과입니다:\n```json\n[{\"index\": 1, \"description\": \"라떼\"}]\n```\n끝."
    assert image_analysis.extract_json_array(text) == [{"index": 1, "description": "라떼"}]


def test_extract_json_array_without_array_raises():
    with pytest.raises(ValueError):
        image_analysis.extract_json_array("no brackets here")


def test_build_image_context_matches_by_index():
    refs = ["/api/images/a.jpg", "/api/images/b.png"]
    analyses = [{"index": 2, "description": "메뉴판", "placement": "메뉴 소개"}, {"index": 1, "description": "외관"}]
    context = image_analysis.build_image_context(refs, analyses)
    first, second = context.split("### 이미지 2")
    assert "/api/images/a.jpg" in first and "외관" in first
    assert "/api/images/b.png" in second and "메뉴판" in second and "메뉴 소개" in second


@pytest.mark.asyncio
async def test_analyze_attached_images_success(tmp_path, mocker):
    (tmp_path / "img-1.jpg").write_bytes(b"x")
    mocker.patch.object(image_analysis.config, "UPLOAD_DIR", str(tmp_path))
    vision = mocker.patch.object(claude_service, "run_claude_with_images", new_callable=AsyncMock, return_value=ClaudeResult(
        output='[{"index": 1, "description": "카페 외관", "placement": "도입부"}]',
        stderr="", exit_code=0, duration_sec=2,
    ))
    usage = UsageAccumulator()

    attached = await image_analysis.analyze_attached_images("카페", ["img-1", "missing"], usage)

    assert attached.references == ["/api/images/img-1.jpg"]
    assert "카페 외관" in attached.context
    assert vision.call_args.kwargs["timeout"] == 120
    assert usage.calls == 1


@pytest.mark.asyncio
async def test_analyze_attached_images_with_nothing_resolved_skips_call(tmp_path, mocker):
    mocker.patch.object(image_analysis.config, "UPLOAD_DIR", str(tmp_path))
    vision = mocker.patch.object(claude_service, "run_claude_with_images", new_callable=AsyncMock)
    attached = await image_analysis.analyze_attached_images("카페", ["nope"], UsageAccumulator())
    assert attached.references == []
    assert attached.context == ""
    vision.assert_not_called()


def test_parse_image_prompts():
    text = "설명\n[IMAGE_PROMPT_1] A sunlit cafe interior\n\n[IMAGE_PROMPT_2]   Latte art close-up  \n기타"
    assert parse_image_prompts(text) == ["A sunlit cafe interior", "Latte art close-up"]
    assert parse_image_prompts("") == []

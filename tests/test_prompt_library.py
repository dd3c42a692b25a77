# /tests/test_prompt_library.py

from blog_auto.models.generation_model import StyleId, LengthId
from blog_auto.services import prompt_library


def test_every_style_has_a_system_prompt():
    for style in StyleId:
        assert prompt_library.build_system_prompt(style)


def test_style_profile_is_appended_to_system_prompt():
    prompt = prompt_library.build_system_prompt(StyleId.CASUAL, "  존댓말을 씁니다.  ")
    assert prompt.startswith(prompt_library.STYLE_PROMPTS[StyleId.CASUAL])
    assert prompt.endswith("## 글쓴이 문체 프로필\n아래는 이 글쓴이의 기존 글에서 분석한 문체입니다. 위 스타일 지침보다 이 문체를 우선해서 재현해주세요.\n\n존댓말을 씁니다.")


def test_user_prompt_includes_inputs():
    prompt = prompt_library.build_user_prompt(
        "서울 카페", ["카페", "라떼"], LengthId.SHORT, additional_info="주차 가능", image_context="## 첨부 이미지"
    )
    assert "서울 카페" in prompt
    assert "카페, 라떼" in prompt
    assert "짧게 (~500자)" in prompt
    assert "주차 가능" in prompt
    assert "## 첨부 이미지" in prompt


def test_user_prompt_without_keywords_asks_for_extraction():
    prompt = prompt_library.build_user_prompt("서울 카페", [], LengthId.LONG)
    assert "자동 추출" in prompt
    assert "## 추가 정보" not in prompt


def test_food_review_prompt_requires_practical_details():
    prompt = prompt_library.build_food_review_prompt("을지로 노포", [], LengthId.MEDIUM)
    assert "주차" in prompt and "영업시간" in prompt and "별점" in prompt


def test_image_prompt_request_truncates_post_and_lists_tags():
    prompt = prompt_library.build_image_prompt_request("가" * 5000, count=2)
    assert prompt.startswith("가" * 4000 + "\n")
    assert "가" * 4001 not in prompt
    assert "[IMAGE_PROMPT_1]" in prompt and "[IMAGE_PROMPT_2]" in prompt


def test_style_analysis_prompt_numbers_samples():
    prompt = prompt_library.build_style_analysis_prompt(["첫 글", "둘째 글"])
    assert "### 샘플 1\n첫 글" in prompt
    assert "### 샘플 2\n둘째 글" in prompt

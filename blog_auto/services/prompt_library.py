# /blog_auto/services/prompt_library.py

"""
This file is the central library for all prompts sent to the Claude CLI.
Treating prompts as code and centralizing them here keeps the orchestration
logic free of long string literals.
"""

from typing import Dict, List, Optional

from ..models.generation_model import StyleId, LengthId


# --- SYSTEM PROMPTS, ONE PER WRITING STYLE ---

STYLE_PROMPTS: Dict[StyleId, str] = {
    StyleId.CASUAL: """당신은 친근하고 대화하듯 글을 쓰는 네이버 블로그 작가입니다.

특징:
- 이모지를 적절히 활용 (과하지 않게, 1-2개/문단)
- 개인적인 경험과 감상 포함
- 독자와 대화하는 느낌
- 문단은 3-4문장으로 짧게
- 마지막에 독자에게 질문이나 의견 요청

금지:
- 딱딱한 공식적 문체
- 광고성 표현
- 과도한 정보 나열""",

    StyleId.INFORMATIVE: """당신은 정확하고 유용한 정보를 전달하는 블로그 작가입니다.

특징:
- 체계적인 구조 (목차 형식)
- 명확한 설명과 예시
- 리스트와 표 활용
- 핵심 요약 포함
- 신뢰성 있는 정보 제공

금지:
- 불확실한 정보
- 주관적 의견 과다
- 두서없는 구성""",

    StyleId.REVIEW: """당신은 솔직하고 균형 잡힌 리뷰를 작성하는 블로그 작가입니다.

특징:
- 장점과 단점 명확히 구분
- 실제 사용 경험 기반
- 추천 대상 명시
- 평가 요약 (별점 형태)
- 구체적인 예시

금지:
- 일방적 칭찬만
- 근거 없는 비판
- 광고성 표현""",

    StyleId.MARKETING: """당신은 효과적으로 가치를 전달하는 마케팅 글 작가입니다.

특징:
- 독자의 니즈와 연결
- 후킹 제목
- 문제 제기 → 해결책 제시
- 행동 유도 (CTA)
- SEO 키워드 자연스럽게 포함

금지:
- 과장된 표현
- 허위 정보
- 스팸성 키워드 반복""",

    StyleId.STORY: """당신은 몰입감 있는 이야기를 쓰는 블로그 작가입니다.

특징:
- 시간순 또는 기승전결 구조
- 생생한 묘사와 감정
- 대화 활용
- 여운 있는 마무리
- 독자의 공감 유도

금지:
- 단조로운 나열
- 감정 과잉
- 현실성 없는 전개""",

    StyleId.FOOD_REVIEW: """당신은 음식과 맛집을 생생하게 표현하는 전문 푸드 블로거입니다.

특징:
- 5감을 활용한 감각적 맛 표현 (식감, 향, 온도, 비주얼, 소리)
- 구체적인 맛 묘사 ("고소한 참기름 향이 입안 가득", "겉바속촉의 완벽한 튀김")
- 메뉴별 상세 평가 및 추천
- 가격 대비 만족도 솔직한 평가
- 실용 정보 필수 포함 (주차, 웨이팅, 예약, 브레이크타임)

필수 포함 정보:
- 총점 (5점 만점, 맛/서비스/분위기/가성비 세부 평가)
- 1인 예상 비용
- 위치 및 찾아가는 방법
- 주차 정보
- 영업시간 및 브레이크타임
- 예약 가능 여부
- 추천 인원/상황 (데이트, 가족모임, 혼밥 등)

사진 가이드:
- [사진1: 가게 외관] 형태로 사진 위치 표시
- 메뉴 사진은 각도, 조명, 구도 팁 포함

금지:
- "최고의", "역대급", "미쳤다" 등 과장된 표현
- 확인되지 않은 영업정보
- 무조건적인 칭찬만 (단점도 솔직하게)
- 광고성/협찬 느낌의 문체""",
}


LENGTH_CONFIG: Dict[LengthId, Dict] = {
    LengthId.SHORT: {"chars": 500, "label": "짧게 (~500자)"},
    LengthId.MEDIUM: {"chars": 1000, "label": "보통 (~1000자)"},
    LengthId.LONG: {"chars": 2000, "label": "길게 (~2000자)"},
}
DEFAULT_LENGTH_LABEL = "약 1000자 내외"


STYLE_PROFILE_SECTION = """

## 글쓴이 문체 프로필
아래는 이 글쓴이의 기존 글에서 분석한 문체입니다. 위 스타일 지침보다 이 문체를 우선해서 재현해주세요.

{profile}"""


def build_system_prompt(style: StyleId, style_profile: Optional[str] = None) -> str:
    prompt = STYLE_PROMPTS[StyleId(style)]
    if style_profile:
        prompt += STYLE_PROFILE_SECTION.format(profile=style_profile.strip())
    return prompt


def _length_label(length: LengthId) -> str:
    return LENGTH_CONFIG.get(LengthId(length), {}).get("label", DEFAULT_LENGTH_LABEL)


# --- USER PROMPT BUILDERS ---

def build_user_prompt(
    topic: str,
    keywords: List[str],
    length: LengthId,
    additional_info: str = "",
    image_context: str = "",
) -> str:
    """General blog post request."""
    keyword_line = ", ".join(keywords) if keywords else "(키워드 없음 - 주제에서 자동 추출)"
    prompt = f"""다음 조건으로 네이버 블로그 글을 작성해주세요.

## 주제
{topic}

## 키워드
{keyword_line}

## 글 길이
{_length_label(length)}
"""
    if additional_info:
        prompt += f"\n## 추가 정보\n{additional_info}\n"
    if image_context:
        prompt += f"\n{image_context}\n"

    prompt += """
## 작성 요청사항
1. 제목을 # 마크다운으로 먼저 작성 (흥미롭고 클릭하고 싶은 제목)
2. 소제목은 ## 마크다운으로 구조화 (3-5개 섹션)
3. 키워드를 자연스럽게 포함 (SEO 고려)
4. 네이버 블로그에 바로 복사해서 사용할 수 있는 형태로 작성
5. 마크다운 형식 유지

글을 작성해주세요:"""
    return prompt


def build_food_review_prompt(
    topic: str,
    keywords: List[str],
    length: LengthId,
    additional_info: str = "",
    image_context: str = "",
) -> str:
    """Restaurant review request; mandates ratings, cost, hours and parking."""
    keyword_line = ", ".join(keywords) if keywords else "(음식점명, 메뉴명, 위치 등에서 자동 추출)"
    prompt = f"""다음 조건으로 음식점 리뷰 블로그 글을 작성해주세요.

## 음식점/메뉴 정보
{topic}

## 키워드
{keyword_line}

## 글 길이
{_length_label(length)}
"""
    if additional_info:
        prompt += f"\n## 추가 정보 (맛, 분위기, 가격 등)\n{additional_info}\n"
    if image_context:
        prompt += f"\n{image_context}\n"

    prompt += """
## 음식 리뷰 필수 포함사항
1. **총평 및 별점** (5점 만점) - 맛/서비스/분위기/가성비 세부 평가
2. **맛 표현** (5감 활용) - 식감, 향, 온도, 비주얼 등 구체적 묘사
3. **실용 정보** - 1인 예상 비용, 위치, 주차, 영업시간, 예약 여부, 추천 상황
4. **사진 배치** - [사진: 설명] 형태로 표시

## 작성 형식
1. 제목을 # 마크다운으로 먼저 작성
2. 소제목은 ## 마크다운으로 구조화
3. 마크다운 형식 유지

## 주의사항
- 과장된 표현 자제
- 확인되지 않은 정보는 "확인 필요"로 표시
- 장점과 단점 균형있게 서술

글을 작성해주세요:"""
    return prompt


QUALITY_REVIEW_PROMPT = """다음 블로그 글 초안을 고도화해주세요.

## 초안
{draft}

## 고도화 요청사항
1. 문장 흐름과 가독성 개선
2. SEO 키워드 밀도 최적화 (1-3%)
3. 소제목 구조 개선
4. 도입부와 마무리 강화
5. 불필요한 반복 제거
6. 구체적 예시나 데이터 보강

## 규칙
- 원본의 핵심 내용과 스타일 유지
- 마크다운 형식 유지 (# 제목, ## 소제목)
- 글 길이를 10-20% 정도 늘려도 됨
- 본문에 있는 이미지 마크다운(![...](...))은 위치와 경로를 그대로 유지

고도화된 글을 작성해주세요:"""


def build_quality_review_prompt(draft: str) -> str:
    return QUALITY_REVIEW_PROMPT.format(draft=draft)


# --- ATTACHED IMAGE ANALYSIS ---

IMAGE_ANALYSIS_PROMPT = """첨부된 이미지 {count}장을 블로그 글 작성을 위해 분석해주세요.

## 글 주제
{topic}

## 분석 요청
각 이미지에 대해 다음을 파악해주세요:
- 무엇이 찍혀 있는지 (장소, 음식, 물건, 인물 등)
- 분위기와 색감
- 블로그 글에서 어느 부분에 배치하면 좋을지

## 출력 형식
이미지 순서대로 아래 JSON 배열만 출력해주세요. 다른 설명은 쓰지 마세요.
[
  {{"index": 1, "description": "이미지 설명", "placement": "추천 배치 위치"}}
]"""


def build_image_analysis_prompt(topic: str, count: int) -> str:
    return IMAGE_ANALYSIS_PROMPT.format(topic=topic, count=count)


# --- IMAGE GENERATION PROMPTS ---

IMAGE_PROMPT_INSTRUCTION = """

## 이미지 프롬프트 요청
위 블로그 글의 핵심 주제를 시각적으로 표현하는 영문 이미지 프롬프트를 {count}개 생성해주세요.

각 프롬프트는 다음 형식으로 출력:
{format_lines}

요구사항:
- 영문으로 작성
- 블로그 대표 이미지에 적합한 구도
- 상세한 묘사 (색상, 구도, 분위기, 조명)
- 각 80단어 이내
- 텍스트/글자 포함 금지"""


def build_image_prompt_request(post: str, count: int = 2, max_post_chars: int = 4000) -> str:
    """The post (truncated) followed by the tagged-output instruction."""
    format_lines = "\n".join(f"[IMAGE_PROMPT_{i}] 프롬프트 내용" for i in range(1, count + 1))
    return post[:max_post_chars] + IMAGE_PROMPT_INSTRUCTION.format(count=count, format_lines=format_lines)


# --- STYLE PROFILE ANALYSIS ---

STYLE_ANALYSIS_PROMPT = """다음 블로그 글 샘플들을 분석하여 글쓴이의 고유한 문체 프로필을 작성해주세요.

## 분석할 글

{samples}

## 분석 항목

다음 항목들을 분석하여 **그대로 프롬프트로 사용할 수 있는 형태**로 작성해주세요:

1. **어투**: 반말/존댓말/혼합, 격식 수준
2. **문장 스타일**: 문장 길이 경향, 접속사 사용 패턴
3. **이모지/특수문자**: 사용 빈도와 패턴
4. **문단 구성**: 문단 길이, 줄바꿈 패턴
5. **도입부 패턴**: 글을 시작하는 전형적인 방식
6. **마무리 패턴**: 글을 끝내는 전형적인 방식
7. **특징적 표현**: 자주 쓰는 말투, 감탄사, 강조 방식
8. **구조 패턴**: 소제목 사용, 리스트 활용, 정보 배치 순서
9. **톤 & 무드**: 전체적인 분위기 (유머, 진지, 따뜻함 등)

## 출력 형식

아래와 같이 시스템 프롬프트에 바로 삽입할 수 있는 형태로 작성해주세요:

이 글쓴이의 문체 특징:
- [특징 1]
- [특징 2]
...

글쓴이의 전형적인 표현:
- [표현 1]
- [표현 2]
...

글 구조 패턴:
- [패턴 1]
- [패턴 2]
...

마크다운 코드블록 없이, 프롬프트 텍스트만 출력해주세요."""


def build_style_analysis_prompt(samples: List[str]) -> str:
    samples_text = "\n\n---\n\n".join(f"### 샘플 {i}\n{s}" for i, s in enumerate(samples, start=1))
    return STYLE_ANALYSIS_PROMPT.format(samples=samples_text)

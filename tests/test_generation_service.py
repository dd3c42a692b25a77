# /tests/test_generation_service.py

import threading
import pytest
from unittest.mock import MagicMock, AsyncMock

from blog_auto import config
from blog_auto.db.models.generation_models import Generation
from blog_auto.models.generation_model import (
    GenerateRequest, GenerationStatus, GenerationRecord, GenerationRunningResponse,
)
from blog_auto.services import claude_service, kling_service
from blog_auto.services.claude_service import ClaudeResult, ClaudeUsage
from blog_auto.services.kling_service import KlingError, KlingImageResult
from blog_auto.services.generation_store import GenerationStore
from blog_auto.services.generation_service import (
    GenerationService, GenerationCapacityError, count_pipeline_steps,
)

POST = "# 서울 카페 추천 베스트 다섯 곳\n\n## 분위기\n조용해요 😀\n\n## 메뉴\n라떼가 맛있어요\n\n## 위치\n역 근처"


def _ok(output=POST, input_tokens=100, output_tokens=50, cost=0.01):
    return ClaudeResult(
        output=output, stderr="", exit_code=0, duration_sec=3,
        usage=ClaudeUsage(input_tokens=input_tokens, output_tokens=output_tokens, cost_usd=cost),
    )


def _failed(stderr="rate limited"):
    return ClaudeResult(output="", stderr=stderr, exit_code=1, duration_sec=1)


# --- Fixtures ---

@pytest.fixture
def mock_db():
    db = MagicMock()
    db.complete_generation.return_value = True
    db.fail_generation.return_value = True
    db.get_style_profile.return_value = None
    return db


@pytest.fixture
def store():
    return GenerationStore(ttl_seconds=300)


@pytest.fixture
def service(mock_db, store):
    return GenerationService(db=mock_db, store=store)


@pytest.fixture
def blog_call(mocker):
    return mocker.patch.object(claude_service, "run_claude_for_blog", new_callable=AsyncMock, return_value=_ok())


@pytest.fixture(autouse=True)
def kling_off(mocker):
    return mocker.patch.object(kling_service, "is_kling_configured", return_value=False)


def _request(**overrides):
    params = {"topic": "서울 카페 추천", "style": "casual", "length": "short", "mode": "quick"}
    params.update(overrides)
    return GenerateRequest(**params)


def _completed_fields(mock_db):
    mock_db.complete_generation.assert_called_once()
    return mock_db.complete_generation.call_args.args[1]


# --- Admission ---

def test_create_job_persists_running_record_and_progress(service, mock_db, store):
    job = service.create_generation_job(_request(keywords=["카페"]))

    assert job["status"] == "running"
    record = mock_db.add_generation_record.call_args.args[0]
    assert record["id"] == job["id"]
    assert record["status"] == "running"
    assert record["keywords"] == ["카페"]
    assert record["image_urls"] == []
    assert store.get_progress(job["id"]).progress == "글 생성을 시작합니다..."


def test_create_job_rejected_at_capacity_without_persisting(service, mock_db, store, monkeypatch):
    monkeypatch.setattr(config, "MAX_CONCURRENT_GENERATIONS", 1)
    store.set_progress("other", GenerationStatus.RUNNING, "...")

    with pytest.raises(GenerationCapacityError, match="이미 생성 중인 글이 있습니다"):
        service.create_generation_job(_request())
    mock_db.add_generation_record.assert_not_called()


def test_finished_jobs_do_not_count_against_capacity(service, store, monkeypatch):
    monkeypatch.setattr(config, "MAX_CONCURRENT_GENERATIONS", 1)
    store.set_progress("old", GenerationStatus.COMPLETED, "완료!")
    assert service.create_generation_job(_request())["status"] == "running"


@pytest.mark.parametrize("overrides, configured, expected", [
    ({}, False, 2),
    ({"mode": "quality"}, False, 3),
    ({"imageIds": ["a"], "mode": "quality", "generateImages": True}, True, 5),
    ({"generateImages": True}, False, 2),
])
def test_count_pipeline_steps(overrides, configured, expected):
    assert count_pipeline_steps(_request(**overrides), configured) == expected


# --- Orchestration: success paths ---

@pytest.mark.asyncio
async def test_quick_mode_makes_one_call_and_completes(service, mock_db, store, blog_call):
    await service.process_generation_job("gen_1", _request(keywords=["카페"]))

    assert blog_call.await_count == 1
    fields = _completed_fields(mock_db)
    assert fields["title"] == "서울 카페 추천 베스트 다섯 곳"
    assert fields["content"] == POST
    assert fields["headings"] == ["분위기", "메뉴", "위치"]
    assert fields["image_urls"] == []
    assert 0 <= fields["seo_score"] <= 100
    assert fields["input_tokens"] == 100
    assert fields["cost_usd"] == pytest.approx(0.01)
    progress = store.get_progress("gen_1")
    assert progress.status == GenerationStatus.COMPLETED
    assert progress.progress == "완료!"
    mock_db.fail_generation.assert_not_called()


@pytest.mark.asyncio
async def test_progress_messages_are_numbered(mock_db, blog_call):
    spy_store = MagicMock(wraps=GenerationStore())
    service = GenerationService(db=mock_db, store=spy_store)

    await service.process_generation_job("gen_1", _request())

    messages = [c.args[2] for c in spy_store.set_progress.call_args_list]
    assert messages == ["글을 생성하고 있습니다... (1/2 단계)", "결과를 정리하고 있습니다... (2/2 단계)", "완료!"]


@pytest.mark.asyncio
async def test_food_review_uses_dedicated_prompt_and_style_profile(service, mock_db, blog_call):
    mock_db.get_style_profile.return_value = MagicMock(profile="반말로 짧게 씁니다.")

    await service.process_generation_job("gen_1", _request(style="food_review", styleProfileId="sp_1"))

    system_prompt, user_prompt = blog_call.call_args.args
    assert "## 글쓴이 문체 프로필" in system_prompt
    assert "반말로 짧게 씁니다." in system_prompt
    assert "음식점/메뉴 정보" in user_prompt


@pytest.mark.asyncio
async def test_missing_style_profile_is_not_fatal(service, mock_db, blog_call):
    await service.process_generation_job("gen_1", _request(styleProfileId="gone"))
    system_prompt = blog_call.call_args.args[0]
    assert "문체 프로필" not in system_prompt
    mock_db.complete_generation.assert_called_once()


@pytest.mark.asyncio
async def test_quality_mode_refines_and_sums_usage(service, mock_db, blog_call):
    refined = POST + "\n\n## 마무리\n또 올게요"
    blog_call.side_effect = [_ok(), _ok(output=refined, input_tokens=200, cost=0.02)]

    await service.process_generation_job("gen_1", _request(mode="quality"))

    assert blog_call.await_count == 2
    assert "초안" in blog_call.call_args_list[1].args[1]
    fields = _completed_fields(mock_db)
    assert fields["content"] == refined
    assert fields["input_tokens"] == 300
    assert fields["cost_usd"] == pytest.approx(0.03)


@pytest.mark.asyncio
async def test_refinement_failure_keeps_draft(service, mock_db, store, blog_call):
    blog_call.side_effect = [_ok(), _failed()]

    await service.process_generation_job("gen_1", _request(mode="quality"))

    assert _completed_fields(mock_db)["content"] == POST
    assert store.get_progress("gen_1").status == GenerationStatus.COMPLETED


@pytest.mark.asyncio
async def test_generated_images_are_appended_and_failures_skipped(service, mock_db, blog_call, kling_off, mocker):
    kling_off.return_value = True
    mocker.patch.object(
        claude_service, "run_claude", new_callable=AsyncMock,
        return_value=_ok(output="[IMAGE_PROMPT_1] a quiet cafe\n[IMAGE_PROMPT_2] latte art", input_tokens=10),
    )
    generate = mocker.patch.object(kling_service, "generate_image", new_callable=AsyncMock, side_effect=[
        KlingImageResult(task_id="t1", image_urls=["https://cdn.test/1.png"]),
        KlingError("failed"),
    ])

    await service.process_generation_job("gen_1", _request(generateImages=True))

    assert [c.args[0] for c in generate.call_args_list] == ["a quiet cafe", "latte art"]
    fields = _completed_fields(mock_db)
    assert fields["image_urls"] == ["https://cdn.test/1.png"]
    assert fields["input_tokens"] == 110


@pytest.mark.asyncio
async def test_image_generation_skipped_when_not_configured(service, mock_db, blog_call, mocker):
    generate = mocker.patch.object(kling_service, "generate_image", new_callable=AsyncMock)
    await service.process_generation_job("gen_1", _request(generateImages=True))
    generate.assert_not_called()
    assert _completed_fields(mock_db)["image_urls"] == []


@pytest.mark.asyncio
async def test_unparsable_image_analysis_keeps_attached_references(service, mock_db, blog_call, mocker, tmp_path, monkeypatch):
    (tmp_path / "abc-123.jpg").write_bytes(b"jpeg")
    monkeypatch.setattr(config, "UPLOAD_DIR", str(tmp_path))
    mocker.patch.object(
        claude_service, "run_claude_with_images", new_callable=AsyncMock,
        return_value=_ok(output="Sorry, I can't describe these."),
    )

    await service.process_generation_job("gen_1", _request(imageIds=["abc-123", "../../etc/passwd"]))

    user_prompt = blog_call.call_args.args[1]
    assert "/api/images/abc-123.jpg" in user_prompt
    fields = _completed_fields(mock_db)
    assert fields["image_urls"] == ["/api/images/abc-123.jpg"]


# --- Orchestration: failure paths ---

@pytest.mark.asyncio
async def test_draft_failure_fails_job_with_diagnostic(service, mock_db, store, blog_call):
    blog_call.return_value = _failed("rate limited")

    await service.process_generation_job("gen_1", _request())

    mock_db.complete_generation.assert_not_called()
    fields = mock_db.fail_generation.call_args.args[1]
    assert fields["error"] == "rate limited"
    assert "duration_sec" in fields
    progress = store.get_progress("gen_1")
    assert progress.status == GenerationStatus.FAILED
    assert progress.progress == "생성 실패"
    assert progress.error == "rate limited"


@pytest.mark.asyncio
async def test_spawn_failure_fails_job(service, mock_db, store, blog_call):
    blog_call.side_effect = FileNotFoundError("claude not found")
    await service.process_generation_job("gen_1", _request())
    assert mock_db.fail_generation.call_args.args[1]["error"] == "claude not found"
    assert store.get_progress("gen_1").status == GenerationStatus.FAILED


@pytest.mark.asyncio
async def test_failure_persistence_error_is_contained(service, mock_db, store, blog_call):
    blog_call.return_value = _failed()
    mock_db.fail_generation.side_effect = RuntimeError("database is locked")

    await service.process_generation_job("gen_1", _request())

    assert store.get_progress("gen_1").status == GenerationStatus.FAILED


# --- Status reads ---

def test_status_while_running_returns_progress_only(service, store):
    store.set_progress("gen_1", GenerationStatus.RUNNING, "글을 생성하고 있습니다... (1/2 단계)")
    result = service.get_generation_status("gen_1")
    assert isinstance(result, GenerationRunningResponse)
    assert result.progress == "글을 생성하고 있습니다... (1/2 단계)"


def test_status_after_eviction_reads_durable_record(service, mock_db):
    mock_db.get_generation.return_value = Generation(
        id="gen_1", topic="서울 카페 추천", keywords=["카페"], style="casual", length="short",
        mode="quick", title="제목", content=POST, status="completed", image_urls=[],
    )
    result = service.get_generation_status("gen_1")
    assert isinstance(result, GenerationRecord)
    assert result.status == GenerationStatus.COMPLETED
    assert result.content == POST
    assert result.progress is None


def test_status_unknown_returns_none(service, mock_db):
    mock_db.get_generation.return_value = None
    assert service.get_generation_status("nope") is None


def test_status_after_failure_carries_store_error(service, mock_db, store):
    store.set_progress("gen_1", GenerationStatus.FAILED, "생성 실패", "rate limited")
    mock_db.get_generation.return_value = Generation(
        id="gen_1", topic="서울 카페 추천", keywords=[], style="casual", length="short",
        mode="quick", status="failed", error="rate limited", image_urls=[],
    )
    result = service.get_generation_status("gen_1")
    assert result.status == GenerationStatus.FAILED
    assert result.progress == "생성 실패"
    assert result.progressError == "rate limited"


@pytest.mark.asyncio
async def test_job_persistence_runs_off_the_event_loop_thread(service, mock_db, blog_call):
    loop_thread = threading.get_ident()
    seen = {}

    def record_thread(name):
        def capture(*args, **kwargs):
            seen[name] = threading.get_ident()
            return True if name == "complete" else MagicMock(profile="반말")
        return capture

    mock_db.get_style_profile.side_effect = record_thread("profile")
    mock_db.complete_generation.side_effect = record_thread("complete")

    await service.process_generation_job("gen_1", _request(styleProfileId="sp_1"))

    assert set(seen) == {"profile", "complete"}
    assert loop_thread not in seen.values()


@pytest.mark.asyncio
async def test_failure_bookkeeping_runs_off_the_event_loop_thread(service, mock_db, blog_call):
    loop_thread = threading.get_ident()
    blog_call.return_value = _failed()
    seen = []
    mock_db.fail_generation.side_effect = lambda *args, **kwargs: seen.append(threading.get_ident()) or True

    await service.process_generation_job("gen_1", _request())

    assert len(seen) == 1
    assert seen[0] != loop_thread

# /tests/test_generation_store.py

import pytest

from blog_auto.models.generation_model import GenerationStatus
from blog_auto.services.generation_store import GenerationStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return GenerationStore(ttl_seconds=300, clock=clock)


def test_set_and_get_progress(store):
    store.set_progress("gen_1", GenerationStatus.RUNNING, "글 생성을 시작합니다...")
    progress = store.get_progress("gen_1")
    assert progress.status == GenerationStatus.RUNNING
    assert progress.progress == "글 생성을 시작합니다..."
    assert progress.error is None


def test_unknown_id_returns_none(store):
    assert store.get_progress("missing") is None


def test_running_count_only_counts_running(store):
    store.set_progress("a", GenerationStatus.RUNNING, "...")
    store.set_progress("b", GenerationStatus.COMPLETED, "완료!")
    store.set_progress("c", GenerationStatus.FAILED, "생성 실패", "boom")
    assert store.get_running_count() == 1


def test_cleanup_evicts_only_old_terminal_entries(store, clock):
    store.set_progress("done", GenerationStatus.COMPLETED, "완료!")
    store.set_progress("running", GenerationStatus.RUNNING, "...")
    clock.now += 301
    store.set_progress("fresh", GenerationStatus.FAILED, "생성 실패", "boom")

    assert store.cleanup() == 1
    assert store.get_progress("done") is None
    assert store.get_progress("running") is not None
    assert store.get_progress("fresh") is not None


def test_entry_at_exact_ttl_is_kept(store, clock):
    store.set_progress("done", GenerationStatus.COMPLETED, "완료!")
    clock.now += 300
    assert store.cleanup() == 0


def test_every_write_refreshes_entry_age(store, clock):
    store.set_progress("gen_1", GenerationStatus.COMPLETED, "완료!")
    clock.now += 200
    store.set_progress("gen_1", GenerationStatus.COMPLETED, "완료!")
    clock.now += 200
    assert store.cleanup() == 0


def test_remove_entry(store):
    store.set_progress("gen_1", GenerationStatus.RUNNING, "...")
    store.remove_entry("gen_1")
    store.remove_entry("gen_1")
    assert store.get_progress("gen_1") is None
    assert store.get_running_count() == 0

from datetime import datetime, timedelta

import pytest

from pathways.cache import QuestionCache
from pathways.models import QuizQuestion
from pathways.routers import quiz as quiz_router


def test_get_returns_snapshot_within_ttl(clock):
    cache = QuestionCache(ttl_seconds=60, clock=clock)
    cache.put("class10", [{"id": 1, "options": ["a"]}])
    clock.advance(59)
    assert cache.get("class10") == [{"id": 1, "options": ["a"]}]


def test_entry_expires_lazily(clock):
    cache = QuestionCache(ttl_seconds=60, clock=clock)
    cache.put("class10", [{"id": 1}])
    clock.advance(60)
    assert cache.size() == 1
    assert cache.get("class10") is None
    assert cache.size() == 0


def test_snapshot_is_isolated_from_callers(clock):
    cache = QuestionCache(ttl_seconds=60, clock=clock)
    questions = [{"id": 1, "options": ["a"]}]
    cache.put("class10", questions)
    questions[0]["options"].append("b")
    cache.get("class10")[0]["options"].append("c")
    assert cache.get("class10") == [{"id": 1, "options": ["a"]}]


def test_invalidate_one_or_all(clock):
    cache = QuestionCache(ttl_seconds=60, clock=clock)
    cache.put("class10", [{"id": 1}])
    cache.put("class12", [{"id": 2}])
    cache.invalidate("class10")
    assert cache.keys() == ["class12"]
    cache.invalidate()
    assert cache.size() == 0


@pytest.fixture
def seeded_questions(db):
    base = datetime(2025, 1, 1)
    db.add_all([
        QuizQuestion(question="Second", options=["x", "y"], category="class10", created_at=base + timedelta(minutes=1)),
        QuizQuestion(question="First", options=["a", "b"], category="class10", created_at=base),
        QuizQuestion(question="Career one", options=["c"], category="class12", created_at=base),
    ])
    db.commit()


@pytest.fixture
def store_reads(monkeypatch):
    calls = []
    original = quiz_router._load_questions

    def counting(db, category):
        calls.append(category)
        return original(db, category)

    monkeypatch.setattr(quiz_router, "_load_questions", counting)
    return calls


def test_second_fetch_within_ttl_is_cached(client, seeded_questions, store_reads):
    first = client.get("/quiz/10th")
    second = client.get("/quiz/10th")
    assert first.status_code == 200 and second.status_code == 200
    assert first.json()["cached"] is False
    assert second.json()["cached"] is True
    assert second.json()["questions"] == first.json()["questions"]
    assert [q["question"] for q in first.json()["questions"]] == ["First", "Second"]
    assert len(store_reads) == 1


def test_aliases_share_one_cache_entry(client, seeded_questions, store_reads):
    client.get("/quiz/class10")
    r = client.get("/quiz/10th")
    assert r.json()["cached"] is True
    assert r.json()["category"] == "class10"
    assert len(store_reads) == 1


def test_fetch_after_ttl_goes_back_to_store(client, seeded_questions, store_reads, clock):
    client.get("/quiz/career")
    clock.advance(15 * 60)
    r = client.get("/quiz/career")
    assert r.json()["cached"] is False
    assert len(store_reads) == 2


def test_reads_do_not_mutate_questions(client, seeded_questions, db):
    before = [(q.id, q.question, list(q.options)) for q in db.query(QuizQuestion).order_by(QuizQuestion.id)]
    for _ in range(3):
        client.get("/quiz/class10")
        client.get("/quiz/class12")
    db.expire_all()
    after = [(q.id, q.question, list(q.options)) for q in db.query(QuizQuestion).order_by(QuizQuestion.id)]
    assert before == after


def test_invalid_category(client):
    r = client.get("/quiz/class11")
    assert r.status_code == 400


def test_empty_category_is_not_found_and_not_cached(client, store_reads):
    r = client.get("/quiz/class12")
    assert r.status_code == 404
    assert r.json()["count"] == 0
    assert client.app.state.question_cache.size() == 0
    client.get("/quiz/class12")
    assert len(store_reads) == 2


def test_cache_clear_endpoints(client, seeded_questions, auth_headers):
    client.get("/quiz/class10")
    client.get("/quiz/class12")
    cache = client.app.state.question_cache
    assert client.delete("/quiz/cache/10th", headers=auth_headers).status_code == 200
    assert cache.keys() == ["class12"]
    assert client.delete("/quiz/cache", headers=auth_headers).status_code == 200
    assert cache.size() == 0
    assert client.delete("/quiz/cache").status_code == 401


def test_health_reports_cache(client, seeded_questions):
    client.get("/quiz/class10")
    body = client.get("/quiz/health").json()
    assert body["database"]["totalQuestions"] == 3
    assert body["cache"]["keys"] == ["class10"]

from datetime import datetime, timedelta

import pytest

from pathways.models import College, Course, TimelineEvent
from pathways.seed import COLLEGES, COURSES, TIMELINE, seed


@pytest.fixture
def seeded(db):
    return seed(db)


def test_seed_counts(seeded, db):
    assert seeded["courses"] == len(COURSES) == db.query(Course).count()
    assert seeded["colleges"] == len(COLLEGES) == db.query(College).count()
    assert seeded["timeline"] == len(TIMELINE) == db.query(TimelineEvent).count()


def test_seed_is_repeatable(seeded, db):
    seed(db)
    assert db.query(Course).count() == len(COURSES)


def test_seeded_question_banks_are_served(client, seeded):
    r = client.get("/quiz/10th")
    assert r.status_code == 200
    assert r.json()["questions"][0]["question"] == "Which subject do you enjoy the most?"


def test_courses_filter_is_case_insensitive_substring(client, seeded):
    body = client.get("/courses?stream=comm").json()
    assert body["total"] == 3
    assert {c["stream"] for c in body["courses"]} == {"Commerce"}
    names = [c["name"] for c in body["courses"]]
    assert names == sorted(names)


def test_courses_pagination(client, seeded):
    body = client.get("/courses?page=2&limit=4").json()
    assert body["currentPage"] == 2
    assert body["count"] == 4
    assert body["totalPages"] == 3


def test_course_streams_and_search(client, seeded):
    assert client.get("/courses/streams").json()["streams"] == ["Arts", "Commerce", "Science"]
    hits = client.get("/courses/search/SURGEON").json()
    assert [c["name"] for c in hits["courses"]] == ["MBBS (Bachelor of Medicine and Surgery)"]


def test_search_treats_wildcards_literally(client, seeded):
    assert client.get("/courses/search/%25").json()["total"] == 0


def test_course_by_id(client, seeded, db):
    course = db.query(Course).first()
    assert client.get(f"/courses/{course.id}").json()["course"]["name"] == course.name
    assert client.get("/courses/99999").status_code == 404
    assert client.get("/courses/not-a-number").status_code == 400


def test_colleges_filters_and_facets(client, seeded):
    body = client.get("/colleges?location=delhi&type=govern").json()
    assert body["total"] == 3
    assert [c["ranking"] for c in body["colleges"]] == sorted(c["ranking"] for c in body["colleges"])
    assert client.get("/colleges/types").json()["types"] == ["Government", "Private"]
    assert "Bangalore" in client.get("/colleges/locations").json()["locations"]


def test_colleges_search_covers_programs(client, seeded):
    names = [c["name"] for c in client.get("/colleges/search/analytics").json()["colleges"]]
    assert names == ["Indian Institute of Management Ahmedabad"]


def test_top_colleges(client, seeded):
    body = client.get("/colleges/top/2").json()
    assert body["count"] == 2
    assert all(c["ranking"] == 1 for c in body["colleges"])
    assert client.get("/colleges/top/101").status_code == 400


def test_timeline_lists_only_active_events(client, seeded, db):
    event = db.query(TimelineEvent).first()
    event.is_active = False
    db.commit()
    body = client.get("/timeline").json()
    assert body["total"] == len(TIMELINE) - 1
    dates = [e["date"] for e in body["events"]]
    assert dates == sorted(dates)


def test_timeline_upcoming_window(client, seeded, db):
    db.add(TimelineEvent(title="Past fair", date=datetime.utcnow() - timedelta(days=3), description="Over", category="general"))
    db.commit()
    body = client.get("/timeline/upcoming").json()
    titles = {e["title"] for e in body["events"]}
    assert "Past fair" not in titles
    assert "Education Fair" not in titles
    assert "Career Guidance Workshop" in titles


def test_timeline_categories_month_and_search(client, seeded, db):
    assert client.get("/timeline/categories").json()["categories"] == ["admission", "exam", "general", "scholarship"]

    db.add(TimelineEvent(title="Board results", date=datetime(2030, 5, 31, 12), description="Results day", category="exam"))
    db.commit()
    month = client.get("/timeline/month/2030/5").json()
    assert [e["title"] for e in month["events"]] == ["Board results"]
    assert client.get("/timeline/month/2030/13").status_code == 400

    hits = client.get("/timeline/search/NEET").json()
    assert hits["total"] == 1
    assert client.get("/timeline/99999").status_code == 404


def test_seed_command_fills_store(session_factory, monkeypatch):
    from pathways import seed as seed_module

    monkeypatch.setattr(seed_module, "init_db", lambda: None)
    monkeypatch.setattr(seed_module, "SessionLocal", session_factory)
    seed_module.main()

    db = session_factory()
    try:
        assert db.query(Course).count() == len(COURSES)
        assert db.query(TimelineEvent).count() == len(TIMELINE)
    finally:
        db.close()

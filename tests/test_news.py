from uuid import uuid4

import pytest
from postgrest.exceptions import APIError

from conftest import FakeQuery, news_row


def test_create_news_applies_defaults(client, auth_headers, fake_db):
    resp = client.post(
        "/api/news",
        json={"title": "  Exam timetable  ", "content": "Published on the board."},
        headers=auth_headers,
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "News created successfully"
    news = body["news"]
    assert news["title"] == "Exam timetable"
    assert news["category"] == "general"
    assert news["priority"] == "medium"
    assert news["targetAudience"] == ["all"]
    assert news["publishedBy"] == "Administrator"
    assert news["isActive"] is True
    assert news["notificationSent"] is False
    assert news["attachments"] == []
    assert news["id"] and news["createdAt"]
    assert len(fake_db.tables["news"]) == 1


def test_create_news_accepts_camel_case_fields(client, auth_headers, fake_db):
    resp = client.post(
        "/api/news",
        json={
            "title": "Parents evening",
            "content": "Thursday 6pm",
            "category": "event",
            "priority": "high",
            "targetAudience": ["parents", "teachers", "parents"],
            "attachments": [{"filename": "map.pdf", "url": "https://cdn/map.pdf", "fileType": "pdf"}],
        },
        headers=auth_headers,
    )

    assert resp.status_code == 201
    news = resp.json()["news"]
    assert news["targetAudience"] == ["parents", "teachers"]
    assert news["attachments"][0]["fileType"] == "pdf"
    assert fake_db.tables["news"][0]["target_audience"] == ["parents", "teachers"]


@pytest.mark.parametrize("payload", [
    {"title": "", "content": "Body"},
    {"title": "   ", "content": "Body"},
    {"content": "Body"},
    {"title": "Title"},
    {"title": "Title", "content": "Body", "category": "gossip"},
    {"title": "Title", "content": "Body", "targetAudience": ["aliens"]},
])
def test_invalid_news_is_rejected_and_not_stored(client, auth_headers, fake_db, payload):
    resp = client.post("/api/news", json=payload, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["message"].startswith("Validation failed")
    assert fake_db.tables["news"] == []


def test_pagination_second_page(client, fake_db):
    for i in range(25):
        fake_db.seed("news", **news_row(title=f"Item {i}"))

    resp = client.get("/api/news", params={"page": 2, "limit": 20})

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["news"]) == 5
    assert body["total"] == 25
    assert body["page"] == 2
    assert body["totalPages"] == 2
    # Oldest five, still newest first
    assert [n["title"] for n in body["news"]] == [f"Item {i}" for i in range(4, -1, -1)]


def test_page_past_the_end_is_empty(client, fake_db):
    for i in range(25):
        fake_db.seed("news", **news_row(title=f"Item {i}"))

    resp = client.get("/api/news", params={"page": 3, "limit": 20})

    assert resp.status_code == 200
    body = resp.json()
    assert body["news"] == []
    assert body["total"] == 25
    assert body["page"] == 3
    assert body["totalPages"] == 2


def test_other_storage_errors_on_listing_are_500(client, fake_db, monkeypatch):
    def rejected(self):
        raise APIError({"message": "permission denied", "code": "42501", "hint": None, "details": None})

    monkeypatch.setattr(FakeQuery, "execute", rejected)

    resp = client.get("/api/news")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Server error"}


def test_list_defaults_to_first_page_of_twenty(client, fake_db):
    for i in range(25):
        fake_db.seed("news", **news_row(title=f"Item {i}"))

    body = client.get("/api/news").json()

    assert len(body["news"]) == 20
    assert body["news"][0]["title"] == "Item 24"
    assert body["page"] == 1


def test_list_filters_by_category_and_hides_archived(client, fake_db):
    fake_db.seed("news", **news_row(title="Exam news", category="exam"))
    fake_db.seed("news", **news_row(title="Holiday news", category="holiday"))
    fake_db.seed("news", **news_row(title="Old exam news", category="exam", is_active=False))

    exam = client.get("/api/news", params={"category": "exam"}).json()
    everything = client.get("/api/news", params={"category": "all"}).json()

    assert [n["title"] for n in exam["news"]] == ["Exam news"]
    assert exam["total"] == 1
    assert {n["title"] for n in everything["news"]} == {"Exam news", "Holiday news"}


@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": "many"}])
def test_bad_pagination_params(client, params):
    resp = client.get("/api/news", params=params)
    assert resp.status_code == 400
    assert resp.json()["success"] is False


def test_latest_returns_five_newest_active(client, fake_db):
    for i in range(7):
        fake_db.seed("news", **news_row(title=f"Item {i}"))
    fake_db.seed("news", **news_row(title="Archived", is_active=False))

    body = client.get("/api/news/latest").json()

    assert [n["title"] for n in body["news"]] == ["Item 6", "Item 5", "Item 4", "Item 3", "Item 2"]


def test_get_news_by_id(client, fake_db):
    row = fake_db.seed("news", **news_row(title="Open day"))

    resp = client.get(f"/api/news/{row['id']}")

    assert resp.status_code == 200
    assert resp.json()["news"]["title"] == "Open day"
    assert "message" not in resp.json()


@pytest.mark.parametrize("news_id", [str(uuid4()), "not-an-id"])
def test_get_missing_news(client, news_id):
    resp = client.get(f"/api/news/{news_id}")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "News not found"}


def test_archive_hides_item_but_keeps_record(client, auth_headers, fake_db):
    row = fake_db.seed("news", **news_row(title="Closing early"))

    resp = client.delete(f"/api/news/{row['id']}", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "News archived successfully"}
    assert client.get("/api/news").json()["news"] == []
    assert client.get(f"/api/news/{row['id']}").status_code == 404

    admin_list = client.get("/api/news/admin/all", headers=auth_headers).json()["news"]
    assert [(n["id"], n["isActive"]) for n in admin_list] == [(row["id"], False)]
    assert len(fake_db.tables["news"]) == 1


def test_archive_missing_news(client, auth_headers):
    resp = client.delete(f"/api/news/{uuid4()}", headers=auth_headers)

    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_update_is_partial(client, auth_headers, fake_db):
    row = fake_db.seed("news", **news_row(title="Draft", content="Keep me"))

    resp = client.put(
        f"/api/news/{row['id']}",
        json={"title": "Final", "priority": "urgent"},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    news = resp.json()["news"]
    assert news["title"] == "Final"
    assert news["priority"] == "urgent"
    assert news["content"] == "Keep me"
    assert resp.json()["message"] == "News updated successfully"


def test_update_with_empty_body_returns_current_item(client, auth_headers, fake_db):
    row = fake_db.seed("news", **news_row(title="Unchanged"))

    resp = client.put(f"/api/news/{row['id']}", json={}, headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json()["news"]["title"] == "Unchanged"


def test_update_missing_news(client, auth_headers):
    resp = client.put(f"/api/news/{uuid4()}", json={"title": "x"}, headers=auth_headers)
    assert resp.status_code == 404


def test_update_cannot_null_required_field(client, auth_headers, fake_db):
    row = fake_db.seed("news", **news_row())

    resp = client.put(f"/api/news/{row['id']}", json={"title": None}, headers=auth_headers)

    assert resp.status_code == 400
    assert fake_db.tables["news"][0]["title"] == "Sports day"


def test_admin_list_is_newest_first_and_includes_archived(client, auth_headers, fake_db):
    fake_db.seed("news", **news_row(title="First"))
    fake_db.seed("news", **news_row(title="Second", is_active=False))

    body = client.get("/api/news/admin/all", headers=auth_headers).json()

    assert [n["title"] for n in body["news"]] == ["Second", "First"]

"""
Integration tests for API endpoints using the seeded SQLite DB.

Each `client` fixture runs the app lifespan, so every test starts a fresh
dashboard session with roster and catalog already loaded.
"""
import pytest


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["source"] == "sql"
        assert body["roster_loaded"] is True
        assert body["catalog_loaded"] is True


class TestAgents:
    def test_list(self, client):
        r = client.get("/dashboard/agents")
        assert r.status_code == 200
        body = r.json()
        assert body["mentor_id"] == 77
        assert body["error"] is None
        assert [a["id"] for a in body["agents"]] == [101, 102, 103]

    def test_row_display_fields(self, client):
        alice = client.get("/dashboard/agents").json()["agents"][0]
        assert alice["initials"] == "AT"
        assert alice["starting_date"] == "2024-01-05"
        assert alice["starting_date_display"] == "Jan 5, 2024"
        assert alice["probation_tone"] == "warning"
        assert alice["selected_week"] == 1
        assert alice["expanded"] is False

    def test_missing_start_date(self, client):
        chen = client.get("/dashboard/agents").json()["agents"][2]
        assert chen["starting_date"] is None
        assert chen["starting_date_display"] == "N/A"
        assert chen["probation_tone"] == "danger"


class TestCatalog:
    def test_metric_ids(self, client):
        body = client.get("/dashboard/catalog").json()
        assert body["loaded"] is True
        assert [e["metric_id"] for e in body["actions"]] == [1, 2, 3]
        assert [e["metric_id"] for e in body["skillsets"]] == [8, 9]
        assert [e["metric_id"] for e in body["requirements"]] == [1, 2]


class TestWeeks:
    def test_load_week(self, client):
        r = client.post("/dashboard/agents/101/weeks/3/load")
        assert r.status_code == 200
        body = r.json()
        assert body["snapshot_loaded"] is True
        assert body["targets_loaded"] is True
        assert body["percentage"] == 28
        assert body["actions"] == {"completed": 1, "total": 3, "ratio": pytest.approx(1 / 3)}
        calls = body["action_rows"][0]
        assert (calls["observed"], calls["target"], calls["is_complete"]) == (5, 5, True)
        assert calls["display"] == "5 / 5"
        assert body["action_rows"][1]["display"] == "1"
        opening = body["skillset_rows"][0]
        assert opening["display"] == "70%"
        assert opening["is_complete"] is False

    def test_cached_view_before_load(self, client):
        r = client.get("/dashboard/agents/102/weeks/5")
        assert r.status_code == 200
        body = r.json()
        assert body["snapshot_loaded"] is False
        assert body["percentage"] == 0
        assert len(body["action_rows"]) == 3

    def test_cached_view_after_load(self, client):
        client.post("/dashboard/agents/101/weeks/3/load")
        body = client.get("/dashboard/agents/101/weeks/3").json()
        assert body["snapshot_loaded"] is True
        assert body["percentage"] == 28

    def test_week_out_of_range(self, client):
        assert client.post("/dashboard/agents/101/weeks/13/load").status_code == 422

    def test_unknown_agent(self, client):
        r = client.post("/dashboard/agents/999/weeks/1/load")
        assert r.status_code == 404
        assert r.json()["code"] == "UNKNOWN_AGENT"


class TestNavigation:
    def test_select_week(self, client):
        r = client.put("/dashboard/agents/102/week", json={"week": 4})
        assert r.status_code == 200
        assert r.json()["selected_week"] == 4
        agents = client.get("/dashboard/agents").json()["agents"]
        assert agents[1]["selected_week"] == 4

    def test_expand_and_collapse(self, client):
        r = client.post("/dashboard/agents/101/expand")
        assert r.status_code == 200
        assert r.json()["expanded"] is True
        assert client.post("/dashboard/collapse").status_code == 204
        agents = client.get("/dashboard/agents").json()["agents"]
        assert all(a["expanded"] is False for a in agents)

    def test_expand_unknown_agent(self, client):
        assert client.post("/dashboard/agents/999/expand").status_code == 404

    def test_refresh(self, client):
        r = client.post("/dashboard/refresh")
        assert r.status_code == 200
        assert len(r.json()["agents"]) == 3
        notices = client.get("/dashboard/notices").json()
        assert [n["message"] for n in notices] == ["Data refreshed successfully"]
        assert notices[0]["level"] == "success"
        assert client.get("/dashboard/notices").json() == []


class TestTargetEditor:
    def test_flow(self, client):
        r = client.post("/targets/editor", json={"agent_id": 102, "week": 2})
        assert r.status_code == 200
        body = r.json()
        assert body["category"] == "action"
        assert [o["current_target"] for o in body["options"]] == [0, 0, 0]
        assert body["selected"] is None

        r = client.put("/targets/editor/metric", json={"kind": "action", "position": 1})
        assert r.status_code == 200
        selected = r.json()["selected"]
        assert (selected["name"], selected["metric_id"], selected["new_target"]) == ("Meetings", 2, 0)

        r = client.put("/targets/editor/draft", json={"value": 4})
        assert r.json()["selected"]["new_target"] == 4

        r = client.post("/targets/editor/save")
        assert r.status_code == 200
        body = r.json()
        assert body["saved"] is True
        assert body["editor"]["selected"] is None
        assert body["editor"]["options"][1]["current_target"] == 4

        messages = [n["message"] for n in client.get("/dashboard/notices").json()]
        assert "Target for Meetings set to 4" in messages

    def test_skillset_category(self, client):
        client.post("/targets/editor", json={"agent_id": 101, "week": 3})
        r = client.put("/targets/editor/metric", json={"kind": "skillset", "position": 0})
        body = r.json()
        assert body["category"] == "skillset"
        assert [o["metric_id"] for o in body["options"]] == [8, 9]
        assert body["selected"]["current_target"] == 75

    def test_text_draft_reads_as_zero(self, client):
        client.post("/targets/editor", json={"agent_id": 101, "week": 1})
        client.put("/targets/editor/metric", json={"kind": "requirement", "position": 0})
        r = client.put("/targets/editor/draft", json={"value": "abc"})
        assert r.json()["selected"]["new_target"] == 0

    def test_negative_draft(self, client):
        client.post("/targets/editor", json={"agent_id": 101, "week": 1})
        client.put("/targets/editor/metric", json={"kind": "action", "position": 0})
        r = client.put("/targets/editor/draft", json={"value": -2})
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_TARGET_VALUE"

    def test_unknown_metric_position(self, client):
        client.post("/targets/editor", json={"agent_id": 101, "week": 1})
        r = client.put("/targets/editor/metric", json={"kind": "action", "position": 3})
        assert r.status_code == 422
        assert r.json()["code"] == "UNKNOWN_METRIC"

    def test_editor_closed(self, client):
        r = client.get("/targets/editor")
        assert r.status_code == 409
        assert r.json()["code"] == "TARGET_EDITOR_CLOSED"

    def test_save_without_selection(self, client):
        client.post("/targets/editor", json={"agent_id": 101, "week": 1})
        r = client.post("/targets/editor/save")
        assert r.status_code == 409
        assert r.json()["code"] == "NO_TARGET_SELECTED"

    def test_close(self, client):
        client.post("/targets/editor", json={"agent_id": 101, "week": 1})
        assert client.delete("/targets/editor").status_code == 204
        assert client.get("/targets/editor").status_code == 409


class TestComments:
    def test_round_trip(self, client):
        r = client.put("/comments/101/2", json={"text": "Strong follow-up this week"})
        assert r.status_code == 200
        assert r.json()["saved"] is False

        r = client.get("/comments/101/2")
        assert r.json()["text"] == "Strong follow-up this week"

        r = client.post("/comments/101/2/save")
        assert r.json()["saved"] is True
        messages = [n["message"] for n in client.get("/dashboard/notices").json()]
        assert "Comment saved successfully" in messages

    def test_empty_by_default(self, client):
        assert client.get("/comments/102/7").json() == {
            "agent_id": 102, "week": 7, "text": "", "saved": False,
        }

    def test_unknown_agent(self, client):
        assert client.put("/comments/999/1", json={"text": "x"}).status_code == 404

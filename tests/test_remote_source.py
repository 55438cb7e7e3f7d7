"""
Tests for HttpDataSource against a patched requests session.
"""
from __future__ import annotations

import asyncio
import json
from datetime import date

import pytest
import requests

from mentortrack.core.errors import MalformedResponseError, RateLimitedError, RemoteServiceError
from mentortrack.schemas.catalog import MetricKind
from mentortrack.schemas.target import TargetUpdate
from mentortrack.services.remote import HttpDataSource

BASE = "https://api.example.test/api:mentor"


def _response(status: int = 200, body=None, raw: bytes | None = None) -> requests.Response:
    r = requests.Response()
    r.status_code = status
    if raw is not None:
        r._content = raw
    elif body is not None:
        r._content = json.dumps(body).encode()
    else:
        r._content = b""
    return r


class _Recorder:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[dict] = []

    def __call__(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture()
def session():
    return requests.Session()


def _source(session, monkeypatch, *responses):
    recorder = _Recorder(*responses)
    monkeypatch.setattr(session, "request", recorder)
    return HttpDataSource(BASE, api_token="secret", timeout=5.0, session=session), recorder


ROSTER_BODY = {
    "mentor1": {"id": 77, "user_id": 9},
    "result1": [
        {
            "id": 101,
            "user_id": 5,
            "starting_date": "2024-01-05T00:00:00.000Z",
            "generation": 3,
            "property_type": "Residential",
            "probation_status": "Ongoing",
            "probation_extended": True,
            "current_rank": 2,
            "_user": [{"full_name": "Alice Tan", "profile_image": "https://img.example.test/a.png"}],
            "_rank": {"rank_name": "Senior"},
        },
        {"id": 102, "_user": []},
    ],
}

METADATA_BODY = {
    "mentorDashboard_actionKpi_masterData": [{"kpi_name": "Calls"}, {"kpi_name": "Meetings"}],
    "mentorDashboard_skillsetKpi_masterData": [{"kpi_name": "Opening"}],
    "mentorDashboard_requirement_masterData": [{"requirement_name": "Weekly report"}],
}

PROGRESS_BODY = {
    "result1": [
        {"kpi_action_progress_kpi_id": 1, "kpi_action_progress_count": 4},
        {"kpi_action_progress_kpi_id": 1, "kpi_action_progress_count": 2},
    ],
    "kpi_skillset_progress_max": [
        {"kpi_skillset_progress_kpi_id": 8, "kpi_skillset_progress_total_score": 72.5},
    ],
    "requirement_progress1": [
        {"requirement_progress_requirement_id": 1, "requirement_progress_count": 1},
    ],
}


class TestParsing:
    def test_roster(self, session, monkeypatch):
        source, recorder = _source(session, monkeypatch, _response(body=ROSTER_BODY))
        roster = asyncio.run(source.fetch_roster())
        assert roster.mentor_id == 77
        alice, bob = roster.agents
        assert alice.full_name == "Alice Tan"
        assert alice.rank_name == "Senior"
        assert alice.starting_date == date(2024, 1, 5)
        assert alice.probation_extended is True
        assert bob.full_name == ""
        assert recorder.requests[0]["method"] == "GET"
        assert recorder.requests[0]["url"] == f"{BASE}/mentor_dashboard_sales"
        assert recorder.requests[0]["timeout"] == 5.0

    def test_auth_header(self, session, monkeypatch):
        _source(session, monkeypatch)
        assert session.headers["Authorization"] == "Bearer secret"

    def test_catalog(self, session, monkeypatch):
        source, _ = _source(session, monkeypatch, _response(body=METADATA_BODY))
        catalog = asyncio.run(source.fetch_catalog())
        assert [e.name for e in catalog.actions] == ["Calls", "Meetings"]
        assert catalog.entry(MetricKind.skillset, 0).name == "Opening"
        assert catalog.size(MetricKind.requirement) == 1

    def test_snapshot(self, session, monkeypatch):
        source, recorder = _source(session, monkeypatch, _response(body=PROGRESS_BODY))
        snapshot = asyncio.run(source.fetch_snapshot(101, 3))
        assert recorder.requests[0]["params"] == {"sales_id": 101, "week_number": 3}
        assert snapshot.observed(MetricKind.action, 1) == 6
        assert snapshot.observed(MetricKind.skillset, 8) == 73
        assert snapshot.observed(MetricKind.requirement, 1) == 1

    def test_target_set(self, session, monkeypatch):
        body = [
            {"kpi_id": 1, "requirement_id": 0, "target_count": 5},
            {"kpi_id": None, "requirement_id": 2, "target_count": 1},
        ]
        source, recorder = _source(session, monkeypatch, _response(body=body))
        targets = asyncio.run(source.fetch_target_set(101, 3))
        assert recorder.requests[0]["url"] == f"{BASE}/mentor_dashboard_sales_progress/target"
        assert targets.count_for(MetricKind.action, 1) == 5
        assert targets.count_for(MetricKind.requirement, 2) == 1

    def test_submit_update(self, session, monkeypatch):
        source, recorder = _source(session, monkeypatch, _response(body={"id": 1}))
        update = TargetUpdate(
            mentor_id=77, agent_id=101, week=3, kind=MetricKind.skillset, absolute_id=9, target_count=80,
        )
        asyncio.run(source.submit_target_update(update))
        sent = recorder.requests[0]
        assert sent["method"] == "POST"
        assert sent["json"] == {
            "mentor_id": 77,
            "sales_id": 101,
            "week_number": 3,
            "kpi_id": 9,
            "target_count": 80,
        }


class TestErrors:
    def test_429_is_rate_limited(self, session, monkeypatch):
        source, _ = _source(session, monkeypatch, _response(status=429))
        with pytest.raises(RateLimitedError):
            asyncio.run(source.fetch_snapshot(101, 1))

    def test_server_error(self, session, monkeypatch):
        source, _ = _source(session, monkeypatch, _response(status=500, body={"message": "x"}))
        with pytest.raises(RemoteServiceError) as exc_info:
            asyncio.run(source.fetch_catalog())
        assert not isinstance(exc_info.value, RateLimitedError)
        assert exc_info.value.status_code == 500

    def test_network_error(self, session, monkeypatch):
        source, _ = _source(session, monkeypatch, requests.ConnectionError("refused"))
        with pytest.raises(RemoteServiceError) as exc_info:
            asyncio.run(source.fetch_roster())
        assert exc_info.value.operation == "fetch_roster"

    def test_body_not_json(self, session, monkeypatch):
        source, _ = _source(session, monkeypatch, _response(raw=b"<html>oops</html>"))
        with pytest.raises(MalformedResponseError):
            asyncio.run(source.fetch_roster())

    def test_wrong_shape(self, session, monkeypatch):
        source, _ = _source(session, monkeypatch, _response(body={"unexpected": []}))
        with pytest.raises(MalformedResponseError):
            asyncio.run(source.fetch_catalog())

    def test_malformed_is_a_remote_error(self):
        assert issubclass(MalformedResponseError, RemoteServiceError)

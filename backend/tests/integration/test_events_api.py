"""
Integration tests for Events API endpoints.

Tests end-to-end flows for event management:
- Identity headers and role checks
- Role-filtered listing and visibility of single events
- Creating single events and generating recurring shifts
- Updating, publishing, unpublishing and deleting events
- Batch operations with per-GUID results
"""

import pytest
from datetime import datetime

from sqlalchemy.exc import OperationalError

from backend.src.api.events import get_event_service
from backend.src.config.settings import AppSettings
from backend.src.models import Event, SignUp
from backend.src.services.event_service import EventService


MISSING_GUID = "evt_01hgw2bbg0000000000000001"


class TestAuthentication:
    """Identity header handling."""

    def test_missing_headers(self, test_client):
        response = test_client.get("/api/events")
        assert response.status_code == 401

    def test_unknown_role(self, test_client):
        response = test_client.get(
            "/api/events", headers={"X-User-Uid": "uid-1", "X-User-Role": "intern"}
        )
        assert response.status_code == 401

    def test_volunteer_cannot_create(self, test_client, auth_headers):
        response = test_client.post(
            "/api/events",
            json={"title": "Shift"},
            headers=auth_headers("volunteer"),
        )
        assert response.status_code == 403

    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestEventsRead:
    """Listing and getting events."""

    @pytest.fixture
    def events(self, sample_event):
        return {
            "draft": sample_event(title="Draft shift", start_time=datetime(2024, 6, 3, 20, 0)),
            "shift": sample_event(
                title="Shift", status="published", start_time=datetime(2024, 6, 4, 20, 0)
            ),
            "open": sample_event(
                title="Open day", type="open_event", status="published",
                start_time=datetime(2024, 6, 5, 10, 0), max_capacity=0,
            ),
        }

    def test_list_for_volunteer(self, test_client, auth_headers, events, sample_sign_up):
        sample_sign_up(events["shift"], "uid-a")

        response = test_client.get("/api/events", headers=auth_headers("volunteer"))

        assert response.status_code == 200
        data = response.json()
        assert [e["title"] for e in data] == ["Shift", "Open day"]
        assert data[0]["sign_up_count"] == 1
        assert data[0]["remaining_capacity"] == 0
        assert data[1]["remaining_capacity"] is None

    def test_list_for_visitor(self, test_client, auth_headers, events):
        response = test_client.get("/api/events", headers=auth_headers("visitor"))
        assert [e["title"] for e in response.json()] == ["Open day"]

    def test_list_for_coordinator(self, test_client, auth_headers, events):
        response = test_client.get("/api/events", headers=auth_headers("coordinator"))
        assert len(response.json()) == 3

    def test_get_event(self, test_client, auth_headers, events):
        guid = events["shift"].guid

        response = test_client.get(f"/api/events/{guid}", headers=auth_headers("volunteer"))

        assert response.status_code == 200
        data = response.json()
        assert data["guid"] == guid
        assert data["start_time"] == "2024-06-04T20:00:00Z"
        assert data["status"] == "published"

    def test_draft_hidden_from_volunteer(self, test_client, auth_headers, events):
        guid = events["draft"].guid
        response = test_client.get(f"/api/events/{guid}", headers=auth_headers("volunteer"))
        assert response.status_code == 404

    def test_get_missing_event(self, test_client, auth_headers):
        response = test_client.get(f"/api/events/{MISSING_GUID}", headers=auth_headers("admin"))
        assert response.status_code == 404


class TestEventsWrite:
    """Creating, updating and deleting events."""

    def test_create_event(self, test_client, auth_headers):
        response = test_client.post(
            "/api/events",
            json={
                "title": "General assembly",
                "type": "general_meeting",
                "start_time": "2024-06-12T18:00:00Z",
                "end_time": "2024-06-12T20:00:00Z",
                "max_capacity": 0,
            },
            headers=auth_headers("coordinator", uid="uid-coord-1"),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["guid"].startswith("evt_")
        assert data["status"] == "draft"
        assert data["coordinator_uid"] == "uid-coord-1"
        assert data["start_time"] == "2024-06-12T18:00:00Z"

    def test_create_event_lists_every_error(self, test_client, auth_headers, test_db_session):
        response = test_client.post(
            "/api/events",
            json={
                "title": "",
                "type": "shift",
                "start_time": "2024-06-12T18:00:00Z",
                "end_time": "2024-06-12T17:00:00Z",
                "max_capacity": 5,
            },
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 400
        errors = response.json()["detail"]["errors"]
        assert set(errors) == {"title", "end_time"}
        assert test_db_session.query(Event).count() == 0

    def test_generate_recurring(self, test_client, auth_headers, test_db_session):
        response = test_client.post(
            "/api/events/recurring",
            json={
                "description": "Evening line",
                "start_date": "2024-06-03",
                "end_date": "2024-06-09",
                "pattern": "weekdays",
                "restrictions": [{"kind": "day", "day": "2024-06-05"}],
            },
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 201
        assert response.json() == {"created": 8}
        assert test_db_session.query(Event).filter(Event.status == "draft").count() == 8

    def test_generate_recurring_with_interval(self, test_client, auth_headers):
        response = test_client.post(
            "/api/events/recurring",
            json={
                "start_date": "2024-06-03",
                "end_date": "2024-06-16",
                "pattern": "all",
                "restrictions": [{"kind": "interval", "start": "2024-06-05", "end": "2024-06-14"}],
                "start_clock": "10:00",
                "end_clock": "12:00",
                "type": "teambuilding",
                "max_capacity": 0,
            },
            headers=auth_headers("admin"),
        )

        assert response.status_code == 201
        assert response.json() == {"created": 4}

    def test_update_event(self, test_client, auth_headers, sample_event):
        event = sample_event(max_capacity=1)

        response = test_client.patch(
            f"/api/events/{event.guid}",
            json={"title": "Night shift", "max_capacity": 2},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Night shift"
        assert response.json()["max_capacity"] == 2

    def test_update_invalid_times(self, test_client, auth_headers, sample_event):
        event = sample_event(start_time=datetime(2024, 6, 3, 20, 0))

        response = test_client.patch(
            f"/api/events/{event.guid}",
            json={"end_time": "2024-06-03T19:00:00Z"},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 400

    def test_publish_unpublish_round_trip(self, test_client, auth_headers, sample_event):
        event = sample_event()
        headers = auth_headers("coordinator")

        published = test_client.post(f"/api/events/{event.guid}/publish", headers=headers).json()
        unpublished = test_client.post(f"/api/events/{event.guid}/unpublish", headers=headers).json()

        assert published["status"] == "published"
        assert unpublished["status"] == "draft"
        assert unpublished["published_at"] == published["published_at"]

    def test_assign_supervisor(self, test_client, auth_headers, sample_event):
        event = sample_event()

        response = test_client.post(
            f"/api/events/{event.guid}/supervisor",
            json={"supervisor": {"id": "uid-coord-7", "name": "Rita", "emoji": "🦉"}},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 200
        assert response.json()["supervisor"]["name"] == "Rita"

    def test_assign_empty_supervisor(self, test_client, auth_headers, sample_event):
        event = sample_event()

        response = test_client.post(
            f"/api/events/{event.guid}/supervisor",
            json={"supervisor": {"emoji": "🦉"}},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 400

    def test_delete_event_removes_sign_ups(
        self, test_client, auth_headers, sample_event, sample_sign_up, test_db_session
    ):
        event = sample_event()
        sample_sign_up(event, "uid-a")

        response = test_client.delete(f"/api/events/{event.guid}", headers=auth_headers("admin"))

        assert response.status_code == 204
        assert test_db_session.query(Event).count() == 0
        assert test_db_session.query(SignUp).count() == 0

    def test_delete_missing_event(self, test_client, auth_headers):
        response = test_client.delete(f"/api/events/{MISSING_GUID}", headers=auth_headers("admin"))
        assert response.status_code == 404


class TestEventsBatch:
    """Batch endpoints."""

    def test_batch_publish_partial_failure(self, test_client, auth_headers, sample_event):
        e1 = sample_event()
        e3 = sample_event()

        response = test_client.post(
            "/api/events/batch/publish",
            json={"guids": [e1.guid, MISSING_GUID, e3.guid]},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["action"] == "publish"
        assert data["outcome"] == "partial_failure"
        assert data["succeeded"] == [e1.guid, e3.guid]
        assert list(data["failed"]) == [MISSING_GUID]
        assert data["results"][e1.guid] == "ok"

    def test_batch_reset_sign_ups(
        self, test_client, auth_headers, sample_event, sample_sign_up, test_db_session
    ):
        event = sample_event(max_capacity=0)
        sample_sign_up(event, "uid-a")
        sample_sign_up(event, "uid-b")

        response = test_client.post(
            "/api/events/batch/reset-sign-ups",
            json={"guids": [event.guid]},
            headers=auth_headers("coordinator"),
        )

        assert response.json()["outcome"] == "success"
        assert test_db_session.query(SignUp).count() == 0

    def test_batch_assign_supervisor(self, test_client, auth_headers, sample_event):
        e1 = sample_event()
        e2 = sample_event()

        response = test_client.post(
            "/api/events/batch/assign-supervisor",
            json={"guids": [e1.guid, e2.guid], "supervisor": {"name": "Rita"}},
            headers=auth_headers("coordinator"),
        )

        assert response.json()["succeeded"] == [e1.guid, e2.guid]

    def test_batch_delete(self, test_client, auth_headers, sample_event, test_db_session):
        e1 = sample_event()

        response = test_client.post(
            "/api/events/batch/delete",
            json={"guids": [e1.guid]},
            headers=auth_headers("admin"),
        )

        assert response.json()["outcome"] == "success"
        assert test_db_session.query(Event).count() == 0

    def test_batch_unpublish_requires_coordinator(self, test_client, auth_headers):
        response = test_client.post(
            "/api/events/batch/unpublish",
            json={"guids": [MISSING_GUID]},
            headers=auth_headers("volunteer"),
        )
        assert response.status_code == 403

    def test_batch_requires_guids(self, test_client, auth_headers):
        response = test_client.post(
            "/api/events/batch/publish",
            json={"guids": []},
            headers=auth_headers("coordinator"),
        )
        assert response.status_code == 422


class TestRecurringLimits:
    """Date range limits of recurring generation."""

    def test_range_past_last_representable_day(self, test_client, auth_headers, test_db_session):
        response = test_client.post(
            "/api/events/recurring",
            json={"start_date": "9999-12-30", "end_date": "9999-12-31", "pattern": "all"},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 400
        assert "end_date" in response.json()["detail"]["errors"]
        assert test_db_session.query(Event).count() == 0

    def test_range_longer_than_limit(self, test_client, auth_headers, test_db_session):
        response = test_client.post(
            "/api/events/recurring",
            json={"start_date": "0001-01-01", "end_date": "9999-12-31", "pattern": "all"},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 400
        assert "end_date" in response.json()["detail"]["errors"]
        assert test_db_session.query(Event).count() == 0


class TestStoreUnavailable:
    """Database connectivity failures surface as 503."""

    def test_publish_answers_503(self, test_client, auth_headers, sample_event, test_db_session, mocker):
        event = sample_event()
        mocker.patch.object(
            test_db_session,
            "commit",
            side_effect=OperationalError("UPDATE events", {}, Exception("database is locked")),
        )

        response = test_client.post(
            f"/api/events/{event.guid}/publish", headers=auth_headers("coordinator")
        )

        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "Service Unavailable"
        assert data["committed"] == 0
        assert "unavailable" in data["message"]

    def test_recurring_reports_committed_events(
        self, test_client, auth_headers, test_db_session, mocker
    ):
        real_commit = test_db_session.commit
        calls = {"count": 0}

        def flaky_commit():
            calls["count"] += 1
            if calls["count"] == 2:
                raise OperationalError("INSERT INTO events", {}, Exception("database is locked"))
            return real_commit()

        mocker.patch.object(test_db_session, "commit", side_effect=flaky_commit)
        settings = AppSettings(CRISISLINE_BATCH_WRITE_LIMIT=4)
        test_client.app.dependency_overrides[get_event_service] = (
            lambda: EventService(test_db_session, settings=settings)
        )

        response = test_client.post(
            "/api/events/recurring",
            json={"start_date": "2024-06-03", "end_date": "2024-06-07", "pattern": "weekdays"},
            headers=auth_headers("coordinator"),
        )

        assert response.status_code == 503
        assert response.json()["committed"] == 4

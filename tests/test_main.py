"""
Tests for the HTTP API against the in-memory backend
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from hvc_service.main import app

MANIFEST = (
    "LA2041,MIA,Juan Perez,GOLD,CONFIRMADO,2A\n"
    "LA2041,MIA,Maria Lopez,SIGNATURE,BOARDING,1A\n"
)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def process(client, text=MANIFEST, strict=False):
    return client.post("/api/v1/manifests/process", json={
        "text": text,
        "flight_date": "2024-03-01",
        "airport_id": "LIM",
        "strict": strict,
    })


def find_passenger(client, name):
    response = client.get("/api/v1/airports/LIM/passengers", params={"q": name})
    return response.json()[0]


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200

    data = response.json()
    assert data["status"] == "healthy"
    assert data["backend"] == "memory"
    assert "manifest_processor" in data["services"]


def test_invalid_endpoint(client):
    response = client.get("/invalid-endpoint")
    assert response.status_code == 404
    assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"
    assert "request_id" not in response.json()


class TestManifestEndpoints:

    def test_parse_reports_errors(self, client):
        response = client.post("/api/v1/manifests/parse", json={"text": MANIFEST + "bad line\n"})
        assert response.status_code == 200

        data = response.json()
        assert data["success"] is False
        assert len(data["data"]) == 2
        assert data["errors"][0].startswith("Line 3:")

    def test_process_and_rerun(self, client):
        first = process(client)
        assert first.status_code == 200
        assert first.json()["summary"]["created"] == 2
        assert first.json()["message"] == "Processed: 2 | Created: 2 | Found: 0"

        second = process(client).json()["summary"]
        assert second["created"] == 0
        assert second["found"] == second["processed"] == 2
        assert len(second["duplicates"]) == 2

        flights = client.get("/api/v1/airports/LIM/flights", params={"flight_date": "2024-03-01"}).json()
        assert [f["code"] for f in flights] == ["LA2041"]

    def test_lenient_mode_skips_bad_lines(self, client):
        response = process(client, MANIFEST + "LA2041,MIA,Nobody,BRONZE,BOARDING,\n")

        data = response.json()
        assert response.status_code == 200
        assert data["summary"]["processed"] == 2
        assert len(data["parse_errors"]) == 1

    def test_strict_mode_rejects_manifest(self, client):
        response = process(client, MANIFEST + "garbage\n", strict=True)

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_MANIFEST"
        assert client.get("/api/v1/airports/LIM/passengers").json() == []

    def test_missing_airport_rejected(self, client):
        response = client.post("/api/v1/manifests/process", json={"text": MANIFEST, "flight_date": "2024-03-01"})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestPassengerEndpoints:

    def test_search_and_update(self, client):
        process(client)
        passenger = find_passenger(client, "maria")
        assert passenger["category"] == "SIGNATURE"

        response = client.patch(f"/api/v1/passengers/{passenger['id']}", json={
            "birth_date": "1985-03-20",
            "likes": {"drink": ["Pisco sour"]},
        })
        assert response.status_code == 200
        assert response.json()["likes"]["drink"] == ["Pisco sour"]
        assert response.json()["name"] == "Maria Lopez"

    def test_create_passenger(self, client):
        response = client.post("/api/v1/passengers", json={
            "name": "Carlos Ruiz",
            "document_number": "70111222",
            "category": "BLACK",
            "airport_id": "LIM",
        })
        assert response.status_code == 201

        duplicate = client.post("/api/v1/passengers", json={
            "name": "Carlos R.",
            "document_number": "70111222",
            "category": "BLACK",
            "airport_id": "LIM",
        })
        assert duplicate.status_code == 409
        assert duplicate.json()["error_code"] == "CONFLICT"

    def test_unknown_passenger(self, client):
        response = client.get("/api/v1/passengers/missing/timeline")
        assert response.status_code == 404
        assert response.json()["error_code"] == "PASSENGER_NOT_FOUND"


class TestRecoveryFlow:
    """Detractor interaction, suggestions, then recovery"""

    def record(self, client, passenger_id, score, when, **extra):
        return client.post("/api/v1/interactions", json={
            "passenger_id": passenger_id,
            "agent_name": "Ana",
            "timestamp": when.isoformat(),
            "score": score,
            **extra,
        })

    def test_recovery_flow(self, client):
        process(client)
        passenger = find_passenger(client, "maria")
        now = datetime.now(timezone.utc)

        response = self.record(
            client, passenger["id"], 3, now - timedelta(hours=2),
            incident="Flight delayed 3 hours", recovery_action="Lounge access"
        )
        assert response.status_code == 201

        suggestions = client.get(f"/api/v1/passengers/{passenger['id']}/suggestions").json()
        assert suggestions[0]["title"] == "Supervisor escalation"
        assert any(s["title"] == "Lounge access during the wait" for s in suggestions)

        applied = client.post("/api/v1/suggestions/applied", json=suggestions[0]).json()
        assert applied["times_applied"] == 1

        recommendations = client.get(f"/api/v1/passengers/{passenger['id']}/recommendations").json()
        assert recommendations[0]["type"] == "danger"

        self.record(client, passenger["id"], 10, now - timedelta(hours=1))

        timeline = client.get(f"/api/v1/passengers/{passenger['id']}/timeline").json()
        assert timeline["at_risk"] is False
        assert timeline["has_successful_recovery"] is True
        assert len(timeline["entries"]) == 2

        assert client.get(f"/api/v1/passengers/{passenger['id']}/suggestions").json() == []

        metrics = client.get("/api/v1/airports/LIM/metrics", params={"period": "all"}).json()
        assert metrics["total_passengers"] == 2
        assert metrics["scored_interactions"] == 2
        assert metrics["nps"] == 0
        assert metrics["recovery_rate"] == 100.0

    def test_invalid_score_rejected(self, client):
        process(client)
        passenger = find_passenger(client, "juan")

        response = self.record(client, passenger["id"], 11, datetime.now(timezone.utc))
        assert response.status_code == 422

    def test_interaction_for_unknown_passenger(self, client):
        response = self.record(client, "missing", 9, datetime.now(timezone.utc))
        assert response.status_code == 404


class TestAgentTools:
    """Favorites, usage stats and service standards"""

    def test_favorites_toggle(self, client):
        response = client.post("/api/v1/suggestions/favorites", json={"title": "Priority rebooking"})
        assert response.json() == {"title": "Priority rebooking", "favorite": True}
        assert client.get("/api/v1/suggestions/favorites").json() == ["Priority rebooking"]

        response = client.post("/api/v1/suggestions/favorites", json={"title": "Priority rebooking"})
        assert response.json()["favorite"] is False
        assert client.get("/api/v1/suggestions/favorites").json() == []

    def test_usage_stats(self, client):
        suggestion = {
            "title": "Personal apology",
            "action": "Have the shift supervisor apologize in person",
            "icon": "🤝",
            "effectiveness": "high",
            "type": "incident-based",
            "category": "immediate",
        }
        client.post("/api/v1/suggestions/applied", json=suggestion)
        client.post("/api/v1/suggestions/applied", json=suggestion)

        usage = client.get("/api/v1/suggestions/usage").json()
        assert usage["most_used"] == [{"title": "Personal apology", "count": 2}]
        assert usage["today"] == 2

    def test_response_times(self, client):
        response = client.get("/api/v1/categories/SIGNATURE/response-times")
        assert response.status_code == 200
        assert response.json()["issue_resolution"] == "< 2 hours"

        assert client.get("/api/v1/categories/GOLD/response-times").json()["follow_up"] == "Within 72 hours"

    def test_protocol_checklist(self, client):
        protocol = client.get("/api/v1/protocols/first_time").json()
        assert len(protocol["actions"]) == 6

        response = client.put("/api/v1/protocols/first_time/checklist/1", json={"completed": True})
        assert response.json() == {"protocol": "first_time", "completed": [1], "progress": 17}
        assert client.get("/api/v1/protocols/first_time/checklist").json()["progress"] == 17

    def test_unknown_protocol(self, client):
        response = client.get("/api/v1/protocols/anniversary")
        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"

    def test_checklist_item_out_of_range(self, client):
        response = client.put("/api/v1/protocols/birthday/checklist/9", json={"completed": True})
        assert response.status_code == 422
        assert set(response.json()) == {"status", "message", "error_code", "timestamp"}

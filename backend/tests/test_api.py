"""API tests.

Error paths run against the MagicMock session (``api_client``); the full
register → port state → record → alert flow runs against a real in-memory
SQLite database (``sqlite_client``).
"""
from __future__ import annotations

from unittest.mock import patch

ADMIN_HEADERS = {"X-Caller-Id": "admin"}


# ---------------------------------------------------------------------------
# Mock-session error paths
# ---------------------------------------------------------------------------


class TestAdminGate:
    def test_register_without_caller_is_forbidden(self, api_client, mock_db):
        resp = api_client.post("/api/v1/vessels", json={"vessel_id": "IMO1", "owner": "Acme", "flag_state": "PA"})
        assert resp.status_code == 403
        assert resp.json()["error"] == "Unauthorized"
        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_register_with_wrong_caller_is_forbidden(self, api_client, mock_db):
        resp = api_client.post(
            "/api/v1/vessels",
            json={"vessel_id": "IMO1"},
            headers={"X-Caller-Id": "mallory"},
        )
        assert resp.status_code == 403

    def test_non_ascii_caller_is_forbidden_not_500(self, api_client, mock_db):
        resp = api_client.post(
            "/api/v1/vessels",
            json={"vessel_id": "IMO1"},
            headers={"X-Caller-Id": b"kapit\xe4n"},
        )
        assert resp.status_code == 403
        assert resp.json()["error"] == "Unauthorized"
        mock_db.commit.assert_not_called()

    def test_set_port_state_requires_admin(self, api_client, mock_db):
        resp = api_client.put("/api/v1/port-states", json={"location": "Baltic Sea", "port_state": "EU"})
        assert resp.status_code == 403
        mock_db.commit.assert_not_called()

    def test_register_as_admin_commits(self, api_client, mock_db):
        resp = api_client.post(
            "/api/v1/vessels",
            json={"vessel_id": "IMO1", "owner": "Acme", "flag_state": "PA"},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 200
        assert resp.json()["vessel_id"] == "IMO1"
        mock_db.commit.assert_called_once()


class TestValidation:
    def test_blank_vessel_id_rejected(self, api_client):
        resp = api_client.post("/api/v1/vessels", json={"vessel_id": "   "}, headers=ADMIN_HEADERS)
        assert resp.status_code == 422

    def test_negative_sulfur_rejected(self, api_client):
        resp = api_client.post(
            "/api/v1/emissions",
            json={"vessel_id": "IMO1", "sulfur_content": -5, "position": "x", "is_eca": True},
        )
        assert resp.status_code == 422

    def test_caller_cannot_supply_compliance(self, api_client):
        resp = api_client.post(
            "/api/v1/emissions",
            json={"vessel_id": "IMO1", "sulfur_content": 900, "position": "x", "is_eca": True,
                  "is_compliant": True},
        )
        assert resp.status_code == 422


class TestUnknownVessel:
    def test_record_for_unknown_vessel_is_404(self, api_client, mock_db):
        resp = api_client.post(
            "/api/v1/emissions",
            json={"vessel_id": "UNKNOWN123", "sulfur_content": 150, "position": "Baltic Sea", "is_eca": True},
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "Vessel not registered"
        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_called()

    def test_vessel_detail_404(self, api_client):
        assert api_client.get("/api/v1/vessels/UNKNOWN123").status_code == 404

    def test_registration_status_for_unknown(self, api_client):
        resp = api_client.get("/api/v1/vessels/UNKNOWN123/registration")
        assert resp.status_code == 200
        assert resp.json() == {"vessel_id": "UNKNOWN123", "registered": False, "flag_state": ""}

    def test_history_for_unknown_is_empty(self, api_client):
        resp = api_client.get("/api/v1/vessels/UNKNOWN123/emissions")
        assert resp.status_code == 200
        assert resp.json() == []


def test_health(api_client):
    resp = api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


# ---------------------------------------------------------------------------
# SQLite-backed flow
# ---------------------------------------------------------------------------


def _setup_baltic(client):
    resp = client.post(
        "/api/v1/vessels",
        json={"vessel_id": "IMO1234567", "owner": "Acme", "flag_state": "PA"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200
    resp = client.put(
        "/api/v1/port-states",
        json={"location": "Baltic Sea", "port_state": "EU"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200


class TestEmissionFlow:
    def test_non_compliant_reading_creates_alert(self, sqlite_client):
        _setup_baltic(sqlite_client)

        resp = sqlite_client.post(
            "/api/v1/emissions",
            json={"vessel_id": "IMO1234567", "sulfur_content": 150, "position": "Baltic Sea", "is_eca": True},
        )
        assert resp.status_code == 201
        reading = resp.json()
        assert reading["is_compliant"] is False
        assert reading["timestamp_utc"]

        alerts = sqlite_client.get("/api/v1/alerts").json()
        assert len(alerts) == 1
        assert alerts[0]["vessel_id"] == "IMO1234567"
        assert alerts[0]["flag_state"] == "PA"
        assert alerts[0]["port_state"] == "EU"
        assert "ECA limit" in alerts[0]["message"]

    def test_snapshot_survives_reregistration(self, sqlite_client):
        _setup_baltic(sqlite_client)
        sqlite_client.post(
            "/api/v1/emissions",
            json={"vessel_id": "IMO1234567", "sulfur_content": 600, "position": "Baltic Sea", "is_eca": False},
        )
        sqlite_client.post(
            "/api/v1/vessels",
            json={"vessel_id": "IMO1234567", "owner": "Acme", "flag_state": "LR"},
            headers=ADMIN_HEADERS,
        )

        alerts = sqlite_client.get("/api/v1/alerts").json()
        assert alerts[0]["flag_state"] == "PA"
        status = sqlite_client.get("/api/v1/vessels/IMO1234567/registration").json()
        assert status == {"vessel_id": "IMO1234567", "registered": True, "flag_state": "LR"}

    def test_history_order_and_idempotent_reads(self, sqlite_client):
        _setup_baltic(sqlite_client)
        for sulfur in (90, 120, 40):
            sqlite_client.post(
                "/api/v1/emissions",
                json={"vessel_id": "IMO1234567", "sulfur_content": sulfur, "position": "Baltic Sea", "is_eca": True},
            )
        first = sqlite_client.get("/api/v1/vessels/IMO1234567/emissions").json()
        second = sqlite_client.get("/api/v1/vessels/IMO1234567/emissions").json()
        assert [r["sulfur_content"] for r in first] == [90, 120, 40]
        assert [r["is_compliant"] for r in first] == [True, False, True]
        assert first == second

    def test_alert_failure_returns_500_and_leaves_no_trace(self, sqlite_client):
        _setup_baltic(sqlite_client)
        with patch(
            "sulfurwatch.modules.compliance_notifier.ComplianceNotifier.report_non_compliance",
            side_effect=RuntimeError("sink down"),
        ):
            resp = sqlite_client.post(
                "/api/v1/emissions",
                json={"vessel_id": "IMO1234567", "sulfur_content": 150, "position": "Baltic Sea", "is_eca": True},
            )
        assert resp.status_code == 500
        assert resp.json()["error"] == "Alert write failed"
        assert sqlite_client.get("/api/v1/vessels/IMO1234567/emissions").json() == []
        assert sqlite_client.get("/api/v1/alerts").json() == []

    def test_direct_report_and_filter(self, sqlite_client):
        resp = sqlite_client.post(
            "/api/v1/alerts",
            json={"vessel_id": "IMO999", "message": "Port inspection finding", "flag_state": "MT"},
        )
        assert resp.status_code == 201
        assert resp.json()["alert_id"] >= 1
        sqlite_client.post("/api/v1/alerts", json={"vessel_id": "IMO888", "message": "Other"})

        filtered = sqlite_client.get("/api/v1/alerts", params={"vessel_id": "IMO999"}).json()
        assert [a["message"] for a in filtered] == ["Port inspection finding"]
        assert filtered[0]["port_state"] == ""

    def test_port_state_lookup_and_list(self, sqlite_client):
        _setup_baltic(sqlite_client)
        one = sqlite_client.get("/api/v1/port-states", params={"location": "Baltic Sea"}).json()
        assert one == {"location": "Baltic Sea", "port_state": "EU"}
        missing = sqlite_client.get("/api/v1/port-states", params={"location": "Atlantis"}).json()
        assert missing["port_state"] == ""
        listing = sqlite_client.get("/api/v1/port-states").json()
        assert listing == [{"location": "Baltic Sea", "port_state": "EU"}]

    def test_stats_and_audit_log(self, sqlite_client):
        _setup_baltic(sqlite_client)
        sqlite_client.post(
            "/api/v1/emissions",
            json={"vessel_id": "IMO1234567", "sulfur_content": 150, "position": "Baltic Sea", "is_eca": True},
        )
        stats = sqlite_client.get("/api/v1/stats").json()
        assert stats == {"vessels": 1, "readings": 1, "non_compliant_readings": 1, "alerts": 1}

        audit = sqlite_client.get("/api/v1/audit-log").json()
        assert audit["total"] == 2
        assert [l["action"] for l in audit["logs"]] == ["set_port_state", "register"]
        assert all(l["actor"] == "admin" for l in audit["logs"])

        vessels = sqlite_client.get("/api/v1/vessels").json()
        assert vessels["total"] == 1
        assert vessels["vessels"][0]["owner"] == "Acme"

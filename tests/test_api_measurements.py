"""
Tests for the measurement endpoints: ingest, latest and history.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import datetime

import pytest
from fastapi.testclient import TestClient

from conftest import AUTH_HEADER, BASE_TS, make_sample
from pqmonitor.api import deps
from pqmonitor.api.main import app
from pqmonitor.config import Settings


def _payload(**overrides) -> dict:
    return make_sample(**overrides).model_dump(mode="json", by_alias=True)


# ---------------------------------------------------------------------------
# POST /api/measurements
# ---------------------------------------------------------------------------


class TestIngest:
    def test_valid_sample_returns_201(self, client: TestClient, sample_store) -> None:
        response = client.post("/api/measurements", json=_payload(), headers=AUTH_HEADER)

        assert response.status_code == 201
        body = response.json()
        assert body["stored"] is True
        assert body["validation"] == {"warnings": [], "errors": [], "valid": True}
        assert body["indicators"]["overall_compliant"] is True
        assert body["measurement"]["voltage_rms"] == 230.0
        assert len(sample_store.rows) == 1

    def test_requires_auth(self, client: TestClient, sample_store) -> None:
        response = client.post("/api/measurements", json=_payload())

        assert response.status_code == 401
        assert sample_store.rows == []

    def test_invalid_token(self, client: TestClient) -> None:
        response = client.post(
            "/api/measurements",
            json=_payload(),
            headers={"Authorization": "Bearer wrong"},
        )
        assert response.status_code == 401

    def test_missing_required_field_returns_422(self, client: TestClient, sample_store) -> None:
        payload = _payload()
        del payload["frequency"]

        response = client.post("/api/measurements", json=payload, headers=AUTH_HEADER)

        assert response.status_code == 422
        assert any(err["loc"] == ["frequency"] for err in response.json()["detail"])
        assert sample_store.rows == []

    def test_implausible_value_returns_422(self, client: TestClient, sample_store) -> None:
        payload = {**_payload(), "voltage_rms": 900.0}

        response = client.post("/api/measurements", json=payload, headers=AUTH_HEADER)

        assert response.status_code == 422
        assert any(err["loc"] == ["voltage_rms"] for err in response.json()["detail"])
        assert sample_store.rows == []

    def test_non_json_body_returns_422(self, client: TestClient) -> None:
        response = client.post(
            "/api/measurements",
            content=b"not json",
            headers={**AUTH_HEADER, "Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_invalid_sample_stored_flagged(self, client: TestClient, sample_store) -> None:
        response = client.post(
            "/api/measurements", json=_payload(current_rms=45.0), headers=AUTH_HEADER
        )

        assert response.status_code == 201
        body = response.json()
        assert body["validation"]["valid"] is False
        assert body["stored"] is True
        assert sample_store.rows[0][1] is False

    def test_invalid_sample_rejected_when_not_stored(
        self, client: TestClient, sample_store
    ) -> None:
        settings = Settings(store_invalid_samples=False)
        app.dependency_overrides[deps.get_app_settings] = lambda: settings

        response = client.post(
            "/api/measurements", json=_payload(cos_phi=0.5), headers=AUTH_HEADER
        )

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["errors"] == ["Power factor 0.5 below minimum 0.85."]
        assert sample_store.rows == []

    def test_warnings_are_returned(self, client: TestClient) -> None:
        response = client.post(
            "/api/measurements", json=_payload(thd_voltage=9.5), headers=AUTH_HEADER
        )

        body = response.json()
        assert response.status_code == 201
        assert body["validation"]["valid"] is True
        assert body["validation"]["warnings"] == ["Voltage THD 9.5% exceeds limit (8.0%)."]
        assert body["indicators"]["thd_within_limits"] is False


# ---------------------------------------------------------------------------
# GET /api/measurements/latest
# ---------------------------------------------------------------------------


class TestLatest:
    def test_no_data_returns_404(self, client: TestClient) -> None:
        response = client.get("/api/measurements/latest")

        assert response.status_code == 404
        assert response.json()["detail"] == "No measurements found."

    def test_returns_newest_sample(self, client: TestClient, sample_store) -> None:
        sample_store.rows.extend(
            [
                (make_sample(), True),
                (make_sample(timestamp=BASE_TS + datetime.timedelta(seconds=3), voltage_rms=231.0), True),
            ]
        )

        response = client.get("/api/measurements/latest")

        assert response.status_code == 200
        assert response.json()["voltage_rms"] == 231.0


# ---------------------------------------------------------------------------
# GET /api/measurements/history
# ---------------------------------------------------------------------------


class TestHistory:
    def _fill(self, sample_store, count: int) -> None:
        for i in range(count):
            ts = BASE_TS + datetime.timedelta(seconds=3 * i)
            sample_store.rows.append((make_sample(timestamp=ts), True))

    def test_range_newest_first(self, client: TestClient, sample_store) -> None:
        self._fill(sample_store, 10)
        start = int(BASE_TS.timestamp())

        response = client.get(
            "/api/measurements/history",
            params={"from": start, "to": start + 9, "limit": 100},
        )

        assert response.status_code == 200
        timestamps = [row["timestamp"] for row in response.json()]
        assert len(timestamps) == 4
        assert timestamps == sorted(timestamps, reverse=True)

    def test_limit_applies(self, client: TestClient, sample_store) -> None:
        self._fill(sample_store, 10)
        start = int(BASE_TS.timestamp())

        response = client.get(
            "/api/measurements/history",
            params={"from": start, "to": start + 60, "limit": 3},
        )

        assert len(response.json()) == 3

    def test_limit_out_of_range_returns_422(self, client: TestClient) -> None:
        assert client.get("/api/measurements/history", params={"limit": 0}).status_code == 422
        assert client.get("/api/measurements/history", params={"limit": 1001}).status_code == 422

    def test_reversed_range_returns_400(self, client: TestClient) -> None:
        start = int(BASE_TS.timestamp())

        response = client.get(
            "/api/measurements/history", params={"from": start, "to": start - 60}
        )

        assert response.status_code == 400

    def test_default_window_is_empty_without_recent_data(
        self, client: TestClient, sample_store
    ) -> None:
        self._fill(sample_store, 3)

        response = client.get("/api/measurements/history")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.parametrize(
        "params",
        [{"from": 10_000_000_000_000}, {"to": 10_000_000_000_000}, {"to": -10_000_000_000_000}],
    )
    def test_unrepresentable_epoch_returns_400(self, client: TestClient, params: dict) -> None:
        response = client.get("/api/measurements/history", params=params)

        assert response.status_code == 400
        assert response.json()["detail"] == "'from' and 'to' must be valid epoch seconds"

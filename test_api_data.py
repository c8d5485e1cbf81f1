"""
Reading ingestion, listing, deletion and analysis endpoints.
"""

from conftest import auth_header
from vibrate_monitor.utils.time import days_ago, utc_today


def save(client, token, reading_date, parameters, unit="DRI1", equipment="GB-cp48A", notes=""):
    return client.post("/api/data", json={
        "unit": unit,
        "equipment": equipment,
        "date": reading_date.isoformat() if hasattr(reading_date, "isoformat") else reading_date,
        "parameters": parameters,
        "notes": notes,
    }, headers=auth_header(token))


def test_config_lists_catalogs(client, make_user):
    _, token = make_user("op@plant.com")

    response = client.get("/api/data/config", headers=auth_header(token))

    assert response.status_code == 200
    body = response.json()
    assert len(body["units"]) == 2
    assert len(body["equipment"]) == 12
    assert len(body["parameters"]) == 12


def test_data_requires_authentication(client):
    assert client.get("/api/data").status_code == 401
    assert client.post("/api/data", json={}).status_code == 401


def test_save_then_resave_upserts(client, make_user):
    _, token = make_user("op@plant.com")

    first = save(client, token, "2024-03-01", {"V1": 5.5}, notes="first")
    assert first.status_code == 200
    assert first.json()["message"] == "Reading saved"
    assert first.json()["data"]["id"] == "data_DRI1_GB-cp48A_2024-03-01"

    second = save(client, token, "2024-03-01", {"V1": 6.25, "GV1": 0.5}, notes="second")
    assert second.status_code == 200
    assert second.json()["message"] == "Reading updated"

    listing = client.get("/api/data", params={"date": "2024-03-01"}, headers=auth_header(token)).json()
    assert listing["pagination"]["total"] == 1
    stored = listing["data"][0]
    assert stored["parameters"] == {"V1": 6.25, "GV1": 0.5}
    assert stored["notes"] == "second"


def test_save_rejects_bad_values_with_details(client, make_user):
    _, token = make_user("op@plant.com")

    response = save(client, token, "2024-03-01", {"V1": 20.001, "GV1": 3})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid parameters"
    assert len(body["details"]) == 2


def test_save_rejects_unknown_unit_and_equipment(client, make_user):
    _, token = make_user("op@plant.com")

    assert save(client, token, "2024-03-01", {"V1": 1}, unit="DRI9").json()["error"] == "Invalid unit"
    assert save(client, token, "2024-03-01", {"V1": 1}, equipment="XX").json()["error"] == "Invalid equipment"


def test_save_rejects_malformed_body(client, make_user):
    _, token = make_user("op@plant.com")

    response = save(client, token, "not-a-date", {"V1": 1})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input"


def test_list_filters(client, make_user):
    _, token = make_user("op@plant.com")
    save(client, token, "2024-03-01", {"V1": 1}, unit="DRI1")
    save(client, token, "2024-03-02", {"V1": 1}, unit="DRI2")
    save(client, token, "2024-03-03", {"V1": 1}, unit="DRI2", equipment="FN-fnMAB")

    by_unit = client.get("/api/data", params={"unit": "DRI2"}, headers=auth_header(token)).json()
    assert by_unit["pagination"]["total"] == 2

    by_range = client.get("/api/data", params={
        "dateFrom": "2024-03-02",
        "dateTo": "2024-03-03",
    }, headers=auth_header(token)).json()
    assert {r["date"] for r in by_range["data"]} == {"2024-03-02", "2024-03-03"}

    paged = client.get("/api/data", params={"limit": 1, "page": 2}, headers=auth_header(token)).json()
    assert len(paged["data"]) == 1
    assert paged["pagination"]["total"] == 3


def test_delete_requires_supervisor_or_admin(client, make_user):
    _, operator = make_user("op@plant.com")
    _, supervisor = make_user("sup@plant.com", role="supervisor")
    data_id = save(client, operator, "2024-03-01", {"V1": 1}).json()["data"]["id"]

    denied = client.delete(f"/api/data/{data_id}", headers=auth_header(operator))
    assert denied.status_code == 403

    allowed = client.delete(f"/api/data/{data_id}", headers=auth_header(supervisor))
    assert allowed.status_code == 200

    missing = client.delete(f"/api/data/{data_id}", headers=auth_header(supervisor))
    assert missing.status_code == 404


def test_analysis_flags_increase(client, make_user):
    _, token = make_user("op@plant.com")
    today = utc_today()
    save(client, token, days_ago(1, today), {"V1": 5.0, "H1": 4.0})
    save(client, token, today, {"V1": 10.0, "H1": 4.2})

    response = client.get("/api/data/analysis", params={"threshold": "20"}, headers=auth_header(token))

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"] == {
        "threshold": 20.0,
        "timeRange": 7,
        "comparisonDays": 1,
        "totalDataPoints": 2,
        "anomaliesFound": 1,
    }
    assert body["anomalies"][0]["parameter"] == "V1"
    assert body["anomalies"][0]["increasePercentage"] == 100.0


def test_analysis_ignores_readings_outside_window(client, make_user):
    _, token = make_user("op@plant.com")
    today = utc_today()
    save(client, token, days_ago(30, today), {"V1": 1.0})
    save(client, token, today, {"V1": 10.0})

    body = client.get("/api/data/analysis", headers=auth_header(token)).json()

    assert body["analysis"]["totalDataPoints"] == 1
    assert body["anomalies"] == []


def test_analysis_with_non_numeric_threshold(client, make_user):
    _, token = make_user("op@plant.com")
    today = utc_today()
    save(client, token, days_ago(1, today), {"V1": 1.0})
    save(client, token, today, {"V1": 10.0})

    body = client.get("/api/data/analysis", params={
        "threshold": "lots",
        "timeRange": "week",
    }, headers=auth_header(token)).json()

    assert body["anomalies"] == []
    assert body["analysis"]["threshold"] is None
    assert body["analysis"]["timeRange"] == 7


def test_analysis_window_includes_its_first_day(client, make_user):
    _, token = make_user("op@plant.com")
    today = utc_today()
    save(client, token, days_ago(8, today), {"V1": 1.0}, equipment="CP-cp48A")
    save(client, token, days_ago(7, today), {"V1": 5.0})
    save(client, token, today, {"V1": 10.0})

    body = client.get("/api/data/analysis", params={"timeRange": "7"}, headers=auth_header(token)).json()

    assert body["analysis"]["totalDataPoints"] == 2
    assert body["anomalies"][0]["comparisonDate"] == days_ago(7, today).isoformat()


def test_analysis_with_huge_time_range(client, make_user):
    _, token = make_user("op@plant.com")
    today = utc_today()
    save(client, token, days_ago(400, today), {"V1": 5.0})
    save(client, token, today, {"V1": 10.0})

    response = client.get("/api/data/analysis", params={"timeRange": "1000000"}, headers=auth_header(token))

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["timeRange"] == 1000000
    assert body["analysis"]["totalDataPoints"] == 2
    assert body["anomalies"][0]["increasePercentage"] == 100.0


def test_notes_are_sanitized(client, make_user):
    _, token = make_user("op@plant.com")

    save(client, token, "2024-03-01", {"V1": 1}, notes="  <script>bearing noise</script> ")

    stored = client.get("/api/data", params={"date": "2024-03-01"}, headers=auth_header(token)).json()["data"][0]
    assert stored["notes"] == "scriptbearing noise/script"

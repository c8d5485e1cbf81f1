"""
Administrator endpoints: account lifecycle, roles, bulk actions and audit.
"""

from conftest import SUPER_ADMIN, auth_header


def root_id(client, root_token):
    return client.get("/api/auth/profile", headers=auth_header(root_token)).json()["user"]["id"]


def test_admin_endpoints_reject_regular_users(client, make_user):
    _, token = make_user("op@plant.com")

    response = client.get("/api/admin/users", headers=auth_header(token))

    assert response.status_code == 403
    assert response.json() == {"error": "You do not have permission to access this resource"}


def test_pending_list_and_approval(client, root_token, make_user):
    user_id, _ = make_user("new@plant.com", approve=False)

    pending = client.get("/api/admin/users/pending", headers=auth_header(root_token)).json()
    assert pending["count"] == 1
    assert pending["users"][0]["id"] == user_id

    approved = client.post(f"/api/admin/users/{user_id}/approve", headers=auth_header(root_token))
    assert approved.status_code == 200
    assert approved.json()["user"]["isApproved"] is True

    again = client.post(f"/api/admin/users/{user_id}/approve", headers=auth_header(root_token))
    assert again.status_code == 400

    pending = client.get("/api/admin/users/pending", headers=auth_header(root_token)).json()
    assert pending["count"] == 0


def test_approve_unknown_user(client, root_token):
    response = client.post("/api/admin/users/user_missing/approve", headers=auth_header(root_token))

    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_deactivated_user_cannot_be_reapproved(client, root_token, make_user):
    user_id, _ = make_user("op@plant.com", approve=False)

    client.post(
        f"/api/admin/users/{user_id}/deactivate",
        json={"reason": "left the company"},
        headers=auth_header(root_token)
    )
    response = client.post(f"/api/admin/users/{user_id}/approve", headers=auth_header(root_token))

    assert response.status_code == 400


def test_super_admin_is_protected(client, root_token, make_user):
    _, admin_token = make_user("boss@plant.com", role="admin")
    super_id = root_id(client, root_token)

    deactivate = client.post(f"/api/admin/users/{super_id}/deactivate", headers=auth_header(admin_token))
    assert deactivate.status_code == 403

    demote = client.put(
        f"/api/admin/users/{super_id}/role",
        json={"role": "operator"},
        headers=auth_header(root_token)
    )
    assert demote.status_code == 403


def test_only_super_admin_grants_admin(client, root_token, make_user):
    _, admin_token = make_user("boss@plant.com", role="admin")
    user_id, _ = make_user("op@plant.com")

    denied = client.put(
        f"/api/admin/users/{user_id}/role",
        json={"role": "admin"},
        headers=auth_header(admin_token)
    )
    assert denied.status_code == 403

    allowed = client.put(
        f"/api/admin/users/{user_id}/role",
        json={"role": "engineer"},
        headers=auth_header(admin_token)
    )
    assert allowed.status_code == 200

    invalid = client.put(
        f"/api/admin/users/{user_id}/role",
        json={"role": "super_admin"},
        headers=auth_header(root_token)
    )
    assert invalid.status_code == 400


def test_reset_password_is_super_admin_only(client, root_token, make_user):
    _, admin_token = make_user("boss@plant.com", role="admin")
    user_id, _ = make_user("op@plant.com")

    denied = client.post(
        f"/api/admin/users/{user_id}/reset-password",
        json={"newPassword": "Reset1234"},
        headers=auth_header(admin_token)
    )
    assert denied.status_code == 403

    weak = client.post(
        f"/api/admin/users/{user_id}/reset-password",
        json={"newPassword": "weak"},
        headers=auth_header(root_token)
    )
    assert weak.status_code == 400

    done = client.post(
        f"/api/admin/users/{user_id}/reset-password",
        json={"newPassword": "Reset1234"},
        headers=auth_header(root_token)
    )
    assert done.status_code == 200

    login = client.post("/api/auth/login", json={"email": "op@plant.com", "password": "Reset1234"})
    assert login.status_code == 200


def test_bulk_approve_collects_failures(client, root_token, make_user):
    first, _ = make_user("a@plant.com", approve=False)
    second, _ = make_user("b@plant.com", approve=False)
    super_id = root_id(client, root_token)

    response = client.post("/api/admin/users/bulk", json={
        "userIds": [first, second, "user_missing", super_id],
        "action": "approve",
    }, headers=auth_header(root_token))

    assert response.status_code == 200
    results = response.json()["results"]
    assert {r["userId"] for r in results["success"]} == {first, second}
    assert {r["userId"] for r in results["failed"]} == {"user_missing", super_id}


def test_bulk_deactivate_skips_super_admin(client, root_token, make_user):
    user_id, _ = make_user("a@plant.com")
    super_id = root_id(client, root_token)

    response = client.post("/api/admin/users/bulk", json={
        "userIds": [user_id, super_id],
        "action": "deactivate",
        "data": {"reason": "cleanup"},
    }, headers=auth_header(root_token))

    results = response.json()["results"]
    assert [r["userId"] for r in results["success"]] == [user_id]
    assert [r["userId"] for r in results["failed"]] == [super_id]


def test_bulk_rejects_unknown_action_and_empty_list(client, root_token):
    unknown = client.post("/api/admin/users/bulk", json={
        "userIds": ["x"],
        "action": "explode",
    }, headers=auth_header(root_token))
    assert unknown.status_code == 400

    empty = client.post("/api/admin/users/bulk", json={
        "userIds": [],
        "action": "approve",
    }, headers=auth_header(root_token))
    assert empty.status_code == 400


def test_user_list_filters_and_pages(client, root_token, make_user):
    make_user("a@plant.com")
    make_user("b@plant.com", approve=False)

    pending = client.get("/api/admin/users", params={"status": "pending"}, headers=auth_header(root_token)).json()
    assert [u["email"] for u in pending["users"]] == ["b@plant.com"]

    paged = client.get("/api/admin/users", params={"limit": 2}, headers=auth_header(root_token)).json()
    assert paged["pagination"]["total"] == 3
    assert paged["pagination"]["pages"] == 2
    assert all("passwordHash" not in u for u in paged["users"])


def test_stats(client, root_token, make_user):
    make_user("a@plant.com")
    make_user("b@plant.com", approve=False)

    stats = client.get("/api/admin/stats", headers=auth_header(root_token)).json()["stats"]

    assert stats["users"]["total"] == 3
    assert stats["users"]["pending"] == 1
    assert stats["users"]["byRole"]["super_admin"] == 1
    assert stats["data"]["totalRecords"] == 0


def test_audit_log_records_actions(client, root_token, make_user):
    user_id, _ = make_user("a@plant.com")
    client.post("/api/auth/login", json={"email": "a@plant.com", "password": "Wrong1234"})

    logs = client.get("/api/admin/audit-logs", params={"limit": 100}, headers=auth_header(root_token)).json()["logs"]
    actions = {log["action"] for log in logs}
    assert {"USER_REGISTERED", "USER_APPROVED", "LOGIN_SUCCESS", "LOGIN_FAILED"} <= actions

    filtered = client.get("/api/admin/audit-logs", params={
        "action": "LOGIN_FAILED",
    }, headers=auth_header(root_token)).json()["logs"]
    assert len(filtered) == 1
    assert filtered[0]["userId"] == user_id
    assert filtered[0]["userName"] == "Test User"


def test_super_admin_can_log_in_with_configured_credentials(client):
    response = client.post("/api/auth/login", json=SUPER_ADMIN)

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "super_admin"


def test_deactivation_reason_is_sanitized(client, root_token, make_user):
    user_id, _ = make_user("op@plant.com")

    client.post(
        f"/api/admin/users/{user_id}/deactivate",
        json={"reason": " <b>left</b> "},
        headers=auth_header(root_token)
    )

    users = client.get("/api/admin/users", params={"status": "inactive"}, headers=auth_header(root_token)).json()["users"]
    assert users[0]["deactivationReason"] == "bleft/b"

"""
End-to-end enforcement through the FastAPI app on the seeded demo data.

Demo offices: Centro (manager Mario, lawyer Laura/Legal, psychologist
Pablo/Psychology, receptionist Rosa) and Norte (coordinator Elena).
"""
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from conftest import auth

from casework.db.session import get_db
from casework.security import dependencies
from casework.security.decorators import guard_resource


def _error(response):
    body = response.json()
    return body["code"], body["error"]


# ---- Identity -----------------------------------------------------------------------


def test_health_is_public(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_header_is_401(client):
    response = client.get("/cases")
    assert response.status_code == 401
    assert _error(response) == ("authentication_required", "Authorization header is required")


def test_malformed_token_is_401(client):
    assert client.get("/cases", headers={"Authorization": "Token 3"}).status_code == 401
    assert client.get("/cases", headers={"Authorization": "Bearer abc"}).status_code == 401


def test_unknown_user_is_401(client):
    response = client.get("/cases", headers=auth(99999))
    assert response.status_code == 401
    assert _error(response)[0] == "identity_not_found"


def test_client_is_rejected_on_staff_routes(client, seeded):
    for path in ("/cases", "/me", f"/cases/{seeded['legal_case']}"):
        response = client.get(path, headers=auth(seeded["client"]))
        assert response.status_code == 403
        assert _error(response) == ("client_role_denied", "Access denied for client role")


def test_staff_without_office_is_rejected(client, seeded):
    response = client.get(f"/cases/{seeded['legal_case']}", headers=auth(seeded["no_office"]))
    assert response.status_code == 403
    assert _error(response)[0] == "office_not_assigned"


# ---- Cases --------------------------------------------------------------------------


def _case_ids(client, user_id):
    response = client.get("/cases", headers=auth(user_id))
    assert response.status_code == 200
    return {c["id"] for c in response.json()}


def test_case_lists_are_scoped(client, seeded):
    assert _case_ids(client, seeded["admin"]) == {seeded["legal_case"], seeded["psych_case"], seeded["norte_case"]}
    assert _case_ids(client, seeded["manager"]) == {seeded["legal_case"], seeded["psych_case"]}
    assert _case_ids(client, seeded["lawyer"]) == {seeded["legal_case"]}
    # No department: office only.
    assert _case_ids(client, seeded["receptionist"]) == {seeded["legal_case"], seeded["psych_case"]}


def test_manager_single_case_by_office(client, seeded):
    headers = auth(seeded["manager"])
    assert client.get(f"/cases/{seeded['legal_case']}", headers=headers).status_code == 200

    response = client.get(f"/cases/{seeded['norte_case']}", headers=headers)
    assert response.status_code == 403
    assert _error(response) == ("access_denied", "Access denied: Case belongs to different office")


def test_staff_single_case_paths(client, seeded):
    assert client.get(f"/cases/{seeded['legal_case']}", headers=auth(seeded["lawyer"])).status_code == 200
    # Same office, other department.
    assert client.get(f"/cases/{seeded['psych_case']}", headers=auth(seeded["lawyer"])).status_code == 403
    # Task on the Norte case.
    assert client.get(f"/cases/{seeded['norte_case']}", headers=auth(seeded["receptionist"])).status_code == 200
    # Explicit case assignment on the Norte case.
    assert client.get(f"/cases/{seeded['norte_case']}", headers=auth(seeded["psychologist"])).status_code == 200
    # Coordinator without department in the Norte office.
    assert client.get(f"/cases/{seeded['norte_case']}", headers=auth(seeded["coordinator"])).status_code == 200


def test_missing_case_is_404(client, seeded):
    for path in ("/cases/99999", "/cases/not-a-number"):
        response = client.get(path, headers=auth(seeded["lawyer"]))
        assert response.status_code == 404
        assert _error(response) == ("resource_not_found", "Case not found")


def test_denied_patch_leaves_case_unchanged(client, seeded):
    response = client.patch(
        f"/cases/{seeded['psych_case']}",
        json={"title": "Changed"},
        headers=auth(seeded["lawyer"]),
    )
    assert response.status_code == 403

    case = client.get(f"/cases/{seeded['psych_case']}", headers=auth(seeded["admin"])).json()
    assert case["title"] == "Terapia familiar"


def test_allowed_patch_updates_case(client, seeded):
    response = client.patch(
        f"/cases/{seeded['legal_case']}",
        json={"status": "closed"},
        headers=auth(seeded["lawyer"]),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "closed"


# ---- Appointments and tasks ---------------------------------------------------------


def test_appointment_list_and_single(client, seeded):
    laura = auth(seeded["lawyer"])
    listed = {a["id"] for a in client.get("/appointments", headers=laura).json()}
    assert listed == {seeded["legal_appt"]}

    rosa = auth(seeded["receptionist"])
    listed = {a["id"] for a in client.get("/appointments", headers=rosa).json()}
    assert listed == {seeded["legal_appt"], seeded["psych_appt"]}

    assert client.get(f"/appointments/{seeded['psych_appt']}", headers=laura).status_code == 403
    assert client.get(f"/appointments/{seeded['psych_appt']}", headers=rosa).status_code == 200
    assert client.get(f"/appointments/{seeded['norte_appt']}", headers=rosa).status_code == 403
    assert client.get(f"/appointments/{seeded['norte_appt']}", headers=auth(seeded["coordinator"])).status_code == 200


def test_task_list_is_my_tasks(client, seeded):
    listed = client.get("/tasks", headers=auth(seeded["lawyer"])).json()
    assert [t["id"] for t in listed] == [seeded["lawyer_task"]]

    assert client.get("/tasks", headers=auth(seeded["manager"])).json() == []
    assert len(client.get("/tasks", headers=auth(seeded["admin"])).json()) == 3


def test_single_task_paths(client, seeded):
    assert client.get(f"/tasks/{seeded['receptionist_task']}", headers=auth(seeded["receptionist"])).status_code == 200
    assert client.get(f"/tasks/{seeded['receptionist_task']}", headers=auth(seeded["psychologist"])).status_code == 200

    response = client.get(f"/tasks/{seeded['unassigned_task']}", headers=auth(seeded["lawyer"]))
    assert response.status_code == 403
    assert _error(response)[1] == "Access denied: Task belongs to unassigned case"

    assert client.get("/tasks/99999", headers=auth(seeded["lawyer"])).status_code == 404


# ---- Users and published scope -------------------------------------------------------


def test_me_and_published_access(client, seeded):
    headers = auth(seeded["lawyer"])
    me = client.get("/me", headers=headers).json()
    assert me["id"] == seeded["lawyer"]

    access = client.get("/me/access", headers=headers).json()
    assert access == {
        "callerRole": "lawyer",
        "officeScope": me["office_id"],
        "departmentScope": "Legal",
        "assignedToScope": None,
    }

    admin_access = client.get("/me/access", headers=auth(seeded["admin"])).json()
    assert admin_access["officeScope"] is None
    assert admin_access["departmentScope"] is None


def test_user_directory_is_office_scoped(client, seeded):
    headers = auth(seeded["lawyer"])
    listed = {u["id"] for u in client.get("/users", headers=headers).json()}
    assert listed == {seeded["manager"], seeded["lawyer"], seeded["psychologist"], seeded["receptionist"]}

    assert client.get(f"/users/{seeded['receptionist']}", headers=headers).status_code == 200
    assert client.get(f"/users/{seeded['coordinator']}", headers=headers).status_code == 403


# ---- Admin routes -------------------------------------------------------------------


def test_offices_require_admin(client, seeded):
    response = client.get("/offices", headers=auth(seeded["admin"]))
    assert response.status_code == 200
    assert [o["name"] for o in response.json()] == ["Centro", "Norte"]

    denied = client.get("/offices", headers=auth(seeded["manager"]))
    assert denied.status_code == 403
    assert _error(denied)[0] == "insufficient_role"


def test_roles_catalogue_excludes_client(client, seeded):
    roles = client.get("/roles", headers=auth(seeded["receptionist"])).json()
    keys = [r["key"] for r in roles]
    assert keys[0] == "admin"
    assert "client" not in keys
    assert len(keys) == 6


def test_guard_resource_decorator_without_config_entry(app, client, seeded):
    @app.get("/case-summaries/{case_id}")
    @guard_resource("case", target_param="case_id")
    def case_summary(case_id: int) -> dict[str, int]:
        return {"id": case_id}

    assert client.get(f"/case-summaries/{seeded['legal_case']}", headers=auth(seeded["lawyer"])).status_code == 200
    assert client.get(f"/case-summaries/{seeded['norte_case']}", headers=auth(seeded["lawyer"])).status_code == 403


# ---- Edge cases ---------------------------------------------------------------------


def test_out_of_range_ids_are_404(client, seeded):
    headers = auth(seeded["lawyer"])
    for path in ("/cases/99999999999999999999", "/cases/0", "/tasks/-3"):
        response = client.get(path, headers=headers)
        assert response.status_code == 404
        assert _error(response)[0] == "resource_not_found"


def test_enforcement_runs_once_per_request(app, client, seeded, monkeypatch):
    calls = {"load_caller": 0, "evaluate": 0}
    real_load_caller = dependencies.load_caller
    real_evaluator_for = dependencies.evaluator_for

    def counting_load_caller(db, user_id):
        calls["load_caller"] += 1
        return real_load_caller(db, user_id)

    def counting_evaluator_for(resource):
        evaluate = real_evaluator_for(resource)

        def counting(*args):
            calls["evaluate"] += 1
            return evaluate(*args)

        return counting

    monkeypatch.setattr(dependencies, "load_caller", counting_load_caller)
    monkeypatch.setattr(dependencies, "evaluator_for", counting_evaluator_for)

    # use_cache=False forces a second call next to the global dependency.
    @app.get("/case-checks/{case_id}", dependencies=[Depends(dependencies.enforce_security, use_cache=False)])
    @guard_resource("case", target_param="case_id")
    def case_check(case_id: int) -> dict[str, int]:
        return {"id": case_id}

    response = client.get(f"/case-checks/{seeded['legal_case']}", headers=auth(seeded["lawyer"]))
    assert response.status_code == 200
    assert calls == {"load_caller": 1, "evaluate": 1}


def test_handler_session_carries_access_context(app, client, seeded):
    @app.get("/case-scope")
    @guard_resource("case")
    def case_scope(db: Session = Depends(get_db)) -> dict[str, object]:
        authz = db.info.get("authz")
        return {"officeScope": authz.office_scope if authz else None}

    lawyer_office = client.get("/me", headers=auth(seeded["lawyer"])).json()["office_id"]
    response = client.get("/case-scope", headers=auth(seeded["lawyer"]))
    assert response.json() == {"officeScope": lawyer_office}


def test_invalid_body_uses_error_shape(client, seeded):
    response = client.patch(
        f"/cases/{seeded['legal_case']}",
        json={"title": 5},
        headers=auth(seeded["lawyer"]),
    )
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "Invalid request"
    assert body["code"] == "validation_error"
    assert body["details"][0]["loc"] == ["body", "title"]


def test_store_failure_during_evaluation_is_503(api_engine, client, seeded):
    # Users still resolve; the case lookup fails.
    with api_engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE cases")

    response = client.get(f"/cases/{seeded['legal_case']}", headers=auth(seeded["lawyer"]))
    assert response.status_code == 503
    assert _error(response) == ("store_unavailable", "Access data temporarily unavailable")

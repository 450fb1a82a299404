from datetime import timedelta

from conftest import auth, run_sql


def public_ids(client, **params):
    rv = client.get("/api/internships", params=params)
    assert rv.status_code == 200
    return [i["id"] for i in rv.json()]


def test_new_internship_starts_pending_and_is_hidden(client, company, create_internship):
    created = create_internship(company["token"], title="Data Intern", is_remote=True)
    assert created["status"] == "pending"
    assert created["company_name"] == "Acme"
    assert created["is_remote"] is True
    assert created["id"] not in public_ids(client)


def test_public_listing_only_shows_approved(client, company, create_internship, approve, admin_token):
    approved = create_internship(company["token"], title="Approved")
    pending = create_internship(company["token"], title="Pending")
    rejected = create_internship(company["token"], title="Rejected")
    approve(approved["id"])
    rv = client.patch(f"/api/admin/internships/{rejected['id']}/reject", headers=auth(admin_token))
    assert rv.status_code == 200

    listing = client.get("/api/internships").json()
    assert [i["id"] for i in listing] == [approved["id"]]
    assert all(i["status"] == "approved" for i in listing)
    assert pending["id"] not in public_ids(client)


def test_public_listing_filters(client, company, create_internship, approve):
    remote = create_internship(company["token"], title="Remote ML Intern", is_remote=True, location="Anywhere")
    onsite = create_internship(company["token"], title="Onsite Design Intern", location="Paris")
    approve(remote["id"])
    approve(onsite["id"])

    assert public_ids(client, search="ml") == [remote["id"]]
    assert public_ids(client, location="paris") == [onsite["id"]]
    assert public_ids(client, remote_only="true") == [remote["id"]]


def test_detail_of_pending_internship_is_owner_or_admin_only(
    client, company, other_company, student, create_internship, admin_token
):
    created = create_internship(company["token"])
    path = f"/api/internships/{created['id']}"

    assert client.get(path).status_code == 404
    assert client.get(path, headers=auth(student["token"])).status_code == 404
    assert client.get(path, headers=auth(other_company["token"])).status_code == 404
    assert client.get(path, headers=auth(company["token"])).status_code == 200
    assert client.get(path, headers=auth(admin_token)).status_code == 200


def test_detail_of_approved_internship_is_public(client, internship):
    rv = client.get(f"/api/internships/{internship['id']}")
    assert rv.status_code == 200
    assert rv.json()["title"] == "Backend Intern"


def test_company_sees_all_own_internships_with_counts(
    client, company, other_company, student, other_student, internship, create_internship
):
    pending = create_internship(company["token"], title="Still pending")
    create_internship(other_company["token"], title="Not ours")
    for s in (student, other_student):
        rv = client.post(f"/api/internships/{internship['id']}/apply", headers=auth(s["token"]))
        assert rv.status_code == 201

    rows = client.get("/api/internships/company/internships", headers=auth(company["token"])).json()
    by_id = {r["id"]: r for r in rows}

    assert set(by_id) == {internship["id"], pending["id"]}
    assert by_id[internship["id"]]["application_count"] == 2
    assert by_id[internship["id"]]["recent_applications"] == 2
    assert by_id[pending["id"]]["application_count"] == 0
    assert by_id[pending["id"]]["status"] == "pending"


def test_owner_updates_only_sent_fields(client, company, internship):
    rv = client.put(
        f"/api/internships/{internship['id']}",
        json={"title": "Senior Backend Intern", "deadline": "2099-01-31"},
        headers=auth(company["token"]),
    )
    assert rv.status_code == 200
    body = rv.json()
    assert body["title"] == "Senior Backend Intern"
    assert body["deadline"] == "2099-01-31"
    assert body["location"] == "Berlin"
    assert body["status"] == "approved"


def test_update_with_no_fields_is_rejected(client, company, internship):
    rv = client.put(f"/api/internships/{internship['id']}", json={}, headers=auth(company["token"]))
    assert rv.status_code == 400
    assert rv.json()["error"] == "NoFieldsProvided"


def test_update_cannot_null_the_title(client, company, internship):
    rv = client.put(f"/api/internships/{internship['id']}", json={"title": None}, headers=auth(company["token"]))
    assert rv.status_code == 400


def test_non_owner_cannot_edit_delete_or_view_applicants(client, other_company, internship):
    token = auth(other_company["token"])
    path = f"/api/internships/{internship['id']}"

    assert client.put(path, json={"title": "Hijacked"}, headers=token).status_code == 403
    assert client.delete(path, headers=token).status_code == 403
    rv = client.get(f"{path}/applicants", headers=token)
    assert rv.status_code == 403
    assert rv.json()["message"] == "You do not have access to this internship."

    # Unchanged
    rv = client.get(path)
    assert rv.status_code == 200
    assert rv.json()["title"] == "Backend Intern"


def test_owner_deletes_internship_and_its_applications(client, company, student, internship):
    client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"]))

    rv = client.delete(f"/api/internships/{internship['id']}", headers=auth(company["token"]))
    assert rv.status_code == 200
    assert rv.json()["message"] == "Internship deleted"

    assert client.get(f"/api/internships/{internship['id']}").status_code == 404
    assert client.get("/api/internships/student/applications", headers=auth(student["token"])).json() == []


def backdate_application(client, application_id, days):
    created = client.app.state.db.now() - timedelta(days=days)
    run_sql(client, "UPDATE applications SET created_at = :ts WHERE id = :id",
            {"ts": created.strftime("%Y-%m-%d %H:%M:%S"), "id": application_id})


def test_recent_applications_window_is_seven_days(client, company, student, other_student, internship):
    apply_path = f"/api/internships/{internship['id']}/apply"
    old = client.post(apply_path, headers=auth(student["token"])).json()
    backdate_application(client, old["id"], days=8)

    rows = client.get("/api/internships/company/internships", headers=auth(company["token"])).json()
    assert rows[0]["application_count"] == 1
    assert rows[0]["recent_applications"] == 0

    newer = client.post(apply_path, headers=auth(other_student["token"])).json()
    backdate_application(client, newer["id"], days=6)

    rows = client.get("/api/internships/company/internships", headers=auth(company["token"])).json()
    assert rows[0]["application_count"] == 2
    assert rows[0]["recent_applications"] == 1


def test_update_of_internship_deleted_meanwhile_is_404(client, company, internship):
    run_sql(client, """
        CREATE TRIGGER vanish AFTER UPDATE ON internships
        BEGIN DELETE FROM internships WHERE id = NEW.id; END
    """)

    rv = client.put(f"/api/internships/{internship['id']}", json={"title": "Renamed"},
                    headers=auth(company["token"]))
    assert rv.status_code == 404

from conftest import auth, run_sql


def test_applying_twice_creates_exactly_one_application(client, company, student, internship):
    path = f"/api/internships/{internship['id']}/apply"

    first = client.post(path, json={"cover_letter": "Hire me"}, headers=auth(student["token"]))
    assert first.status_code == 201
    assert first.json()["status"] == "pending"
    assert first.json()["cover_letter"] == "Hire me"

    second = client.post(path, json={"cover_letter": "Again"}, headers=auth(student["token"]))
    assert second.status_code == 400
    assert second.json()["error"] == "DuplicateApplication"

    mine = client.get("/api/internships/student/applications", headers=auth(student["token"])).json()
    assert len(mine) == 1
    applicants = client.get(f"/api/internships/{internship['id']}/applicants", headers=auth(company["token"])).json()
    assert len(applicants) == 1


def test_apply_without_body(client, student, internship):
    rv = client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"]))
    assert rv.status_code == 201
    assert rv.json()["cover_letter"] is None


def test_cannot_apply_to_pending_or_missing_internship(client, company, student, create_internship):
    pending = create_internship(company["token"])
    for internship_id in (pending["id"], 99999):
        rv = client.post(f"/api/internships/{internship_id}/apply", headers=auth(student["token"]))
        assert rv.status_code == 404


def test_cannot_apply_after_deadline(client, company, student, create_internship, approve):
    closed = create_internship(company["token"], deadline="2000-01-01")
    approve(closed["id"])
    rv = client.post(f"/api/internships/{closed['id']}/apply", headers=auth(student["token"]))
    assert rv.status_code == 400
    assert rv.json()["error"] == "InternshipNotOpen"


def test_student_application_list_includes_internship_details(client, student, internship):
    client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"]))
    rows = client.get("/api/internships/student/applications", headers=auth(student["token"])).json()
    assert rows[0]["title"] == "Backend Intern"
    assert rows[0]["company_name"] == "Acme"
    assert rows[0]["internship_id"] == internship["id"]


def test_applicants_include_student_contact(client, company, student, internship):
    client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"]))
    rows = client.get(f"/api/internships/{internship['id']}/applicants", headers=auth(company["token"])).json()
    assert rows[0]["email"] == "alice@university.edu"
    assert rows[0]["first_name"] == "Alice"
    assert rows[0]["user_id"] == student["user"]["id"]


def test_owner_updates_application_status(client, company, student, internship):
    app_id = client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"])).json()["id"]

    rv = client.patch(f"/api/internships/applications/{app_id}", json={"status": "shortlisted"},
                      headers=auth(company["token"]))
    assert rv.status_code == 200
    assert rv.json()["status"] == "shortlisted"

    mine = client.get("/api/internships/student/applications", headers=auth(student["token"])).json()
    assert mine[0]["status"] == "shortlisted"


def test_status_update_rejects_unknown_status(client, company, student, internship):
    app_id = client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"])).json()["id"]
    rv = client.patch(f"/api/internships/applications/{app_id}", json={"status": "hired-yesterday"},
                      headers=auth(company["token"]))
    assert rv.status_code == 400
    assert rv.json()["error"] == "ValidationError"


def test_other_company_cannot_update_application(client, other_company, student, internship):
    app_id = client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"])).json()["id"]

    rv = client.patch(f"/api/internships/applications/{app_id}", json={"status": "rejected"},
                      headers=auth(other_company["token"]))
    assert rv.status_code == 403

    mine = client.get("/api/internships/student/applications", headers=auth(student["token"])).json()
    assert mine[0]["status"] == "pending"


def test_internship_deleted_before_insert_is_not_a_duplicate(client, student, internship):
    # Remove the internship between the status check and the insert
    run_sql(client, """
        CREATE TRIGGER vanish BEFORE INSERT ON applications
        BEGIN DELETE FROM internships WHERE id = NEW.internship_id; END
    """)

    rv = client.post(f"/api/internships/{internship['id']}/apply", headers=auth(student["token"]))
    assert rv.status_code == 404
    assert rv.json()["error"] == "NotFound"

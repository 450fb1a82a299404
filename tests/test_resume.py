from fastapi.testclient import TestClient

from conftest import auth, run_sql

PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"


def upload(client, token, filename="alice_cv.pdf", content=PDF_BYTES, content_type="application/pdf"):
    return client.post(
        "/api/auth/upload-resume",
        files={"resume": (filename, content, content_type)},
        headers=auth(token),
    )


def test_upload_records_reference_and_original_name(client, student, settings):
    rv = upload(client, student["token"])
    assert rv.status_code == 200
    body = rv.json()
    assert body["filename"] == "alice_cv.pdf"
    assert body["url"].startswith("/uploads/resumes/resume_")
    assert body["url"].endswith(".pdf")

    stored = settings.resume_dir / body["url"].rsplit("/", 1)[-1]
    assert stored.read_bytes() == PDF_BYTES

    profile = client.get("/api/internships/student/profile", headers=auth(student["token"])).json()
    assert profile["resume_url"] == body["url"]
    assert profile["resume_filename"] == "alice_cv.pdf"


def test_download_streams_original_bytes_with_original_filename(client, student, company):
    url = upload(client, student["token"]).json()["url"]
    storage_name = url.rsplit("/", 1)[-1]

    rv = client.get(f"/api/auth/download/resume/{student['user']['id']}", headers=auth(company["token"]))
    assert rv.status_code == 200
    assert rv.content == PDF_BYTES
    disposition = rv.headers["content-disposition"]
    assert disposition.startswith("attachment")
    assert 'filename="alice_cv.pdf"' in disposition
    assert storage_name not in disposition


def test_company_fetches_resume_reference(client, student, company):
    uploaded = upload(client, student["token"]).json()
    rv = client.get(f"/api/auth/student/{student['user']['id']}/resume", headers=auth(company["token"]))
    assert rv.status_code == 200
    assert rv.json() == uploaded


def test_students_cannot_download_resumes(client, student, other_student):
    upload(client, student["token"])
    rv = client.get(f"/api/auth/download/resume/{student['user']['id']}", headers=auth(other_student["token"]))
    assert rv.status_code == 403
    assert rv.json()["message"] == "Only companies can download resumes."


def test_missing_resume_is_404(client, student, company):
    for path in (f"/api/auth/student/{student['user']['id']}/resume",
                 f"/api/auth/download/resume/{student['user']['id']}",
                 "/api/auth/download/resume/99999"):
        rv = client.get(path, headers=auth(company["token"]))
        assert rv.status_code == 404


def test_reupload_replaces_previous_file(client, student, settings):
    first = upload(client, student["token"]).json()["url"]
    second = upload(client, student["token"], filename="alice_cv_v2.docx", content=b"new version").json()["url"]

    assert first != second
    assert not (settings.resume_dir / first.rsplit("/", 1)[-1]).exists()
    assert (settings.resume_dir / second.rsplit("/", 1)[-1]).read_bytes() == b"new version"


def test_upload_validation(client, student):
    rv = upload(client, student["token"], filename="payload.exe", content=b"MZ")
    assert rv.status_code == 400
    assert rv.json()["error"] == "InvalidFile"

    rv = upload(client, student["token"], filename="empty.pdf", content=b"")
    assert rv.status_code == 400

    rv = client.post("/api/auth/upload-resume", headers=auth(student["token"]))
    assert rv.status_code == 400
    assert rv.json()["message"] == "No file uploaded."


def test_upload_size_limit(client, student, settings):
    too_big = b"x" * (settings.max_resume_size_mb * 1024 * 1024 + 1)
    rv = upload(client, student["token"], filename="huge.txt", content=too_big, content_type="text/plain")
    assert rv.status_code == 413
    assert list(settings.resume_dir.iterdir()) == []


def test_uploaded_file_is_served_statically(client, student):
    url = upload(client, student["token"]).json()["url"]
    rv = client.get(url)
    assert rv.status_code == 200
    assert rv.content == PDF_BYTES


def test_failed_profile_update_removes_stored_file(client, student, settings):
    run_sql(client, """
        CREATE TRIGGER block_resume BEFORE UPDATE OF resume_url ON students
        BEGIN SELECT RAISE(ABORT, 'resume update blocked'); END
    """)
    failing = TestClient(client.app, raise_server_exceptions=False)

    rv = upload(failing, student["token"])
    assert rv.status_code == 500
    assert rv.json()["message"] == "Server error"
    assert list(settings.resume_dir.iterdir()) == []

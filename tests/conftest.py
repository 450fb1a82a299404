import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from internlink.core.config import Settings
from internlink.main import create_app

ADMIN_EMAIL = "admin@internlink.io"
ADMIN_PASSWORD = "admin-password"
PASSWORD = "secret-pass-1"
SECRET = "test-secret"


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def run_sql(client, sql, params=None):
    """Execute SQL directly against the app's database."""
    with client.app.state.db.session() as s:
        s.execute(text(sql), params or {})


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        upload_dir=tmp_path / "uploads",
        jwt_secret_key=SECRET,
        bcrypt_rounds=4,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


@pytest.fixture
def register(client):
    def _register(email, role="student", **fields):
        body = {"email": email, "password": PASSWORD, "role": role}
        if role == "company":
            body.setdefault("company_name", fields.pop("company_name", email.split("@")[0].title()))
        body.update(fields)
        rv = client.post("/api/auth/register", json=body)
        assert rv.status_code == 201, rv.json()
        return rv.json()
    return _register


@pytest.fixture
def admin_token(client):
    rv = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert rv.status_code == 200
    return rv.json()["token"]


@pytest.fixture
def student(register):
    return register("alice@university.edu", "student", first_name="Alice", last_name="Smith")


@pytest.fixture
def other_student(register):
    return register("bob@university.edu", "student", first_name="Bob", last_name="Jones")


@pytest.fixture
def company(register):
    return register("hr@acme.com", "company", company_name="Acme")


@pytest.fixture
def other_company(register):
    return register("jobs@globex.com", "company", company_name="Globex")


@pytest.fixture
def create_internship(client):
    def _create(company_token, **fields):
        body = {"title": "Backend Intern", "location": "Berlin", "type": "full-time"}
        body.update(fields)
        rv = client.post("/api/internships", json=body, headers=auth(company_token))
        assert rv.status_code == 201, rv.json()
        return rv.json()
    return _create


@pytest.fixture
def approve(client, admin_token):
    def _approve(internship_id):
        rv = client.patch(f"/api/admin/internships/{internship_id}/approve", headers=auth(admin_token))
        assert rv.status_code == 200
    return _approve


@pytest.fixture
def internship(company, create_internship, approve):
    """An approved internship owned by `company`."""
    created = create_internship(company["token"])
    approve(created["id"])
    return created

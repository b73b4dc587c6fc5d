import html
import os
import re
import tempfile
import uuid

# Point the app at throwaway storage before anything imports portal.config
_TMP = tempfile.mkdtemp(prefix="portal_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP}/test.db"
os.environ["STORAGE_BASE_DIR"] = os.path.join(_TMP, "storage")
os.environ["SITE_URL"] = "http://testserver"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RESEND_API_KEY"] = ""
os.environ["AUTH_REQUIRE_EMAIL_CONFIRMATION"] = "true"

import pytest
from fastapi.testclient import TestClient

from portal.db import Base, engine
from portal.mailer import LogMailer, get_mailer
from portal.main import app

Base.metadata.create_all(bind=engine)

OUTBOX = LogMailer()
app.dependency_overrides[get_mailer] = lambda: OUTBOX

PASSWORD = "S3cretPwd!"
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"
PDF_MIME = "application/pdf"


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def first_link(message_html: str) -> str:
    m = re.search(r'href="([^"]+)"', message_html)
    assert m, message_html
    return html.unescape(m.group(1))


def register_confirmed(client: TestClient, email: str, password: str = PASSWORD) -> None:
    r = client.post(
        "/sign-up",
        data={"email": email, "password": password, "confirm_password": password, "terms": "on"},
        follow_redirects=False,
    )
    assert r.status_code == 303, r.text
    confirm = [m for m in OUTBOX.outbox if m.to == email][-1]
    r2 = client.get(first_link(confirm.html), follow_redirects=False)
    assert r2.status_code == 303
    assert "Email+confirmed" in r2.headers["location"]


def sign_in(client: TestClient, email: str, password: str = PASSWORD) -> None:
    r = client.post("/sign-in", data={"email": email, "password": password}, follow_redirects=False)
    assert r.status_code == 303, r.text
    assert r.headers["location"] == "/dashboard"


def bearer(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    tok = client.post(
        "/auth/token",
        data={"username": email, "password": password},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    ).json()["access_token"]
    return {"Authorization": f"Bearer {tok}"}


@pytest.fixture
def mailer():
    OUTBOX.outbox.clear()
    return OUTBOX


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user_client(client, mailer):
    """A client holding a session cookie for a fresh confirmed account."""
    email = unique_email()
    register_confirmed(client, email)
    sign_in(client, email)
    client.email = email
    return client


@pytest.fixture
def restore_overrides():
    saved = dict(app.dependency_overrides)
    yield app.dependency_overrides
    app.dependency_overrides.clear()
    app.dependency_overrides.update(saved)

from conftest import PDF_BYTES, PDF_MIME, bearer, register_confirmed, unique_email


def make_user(client):
    email = unique_email("api")
    register_confirmed(client, email)
    return bearer(client, email)


def test_api_upload_list_delete(client, mailer):
    auth = make_user(client)
    r = client.post("/api/submissions", headers=auth, files={"file": ("case.pdf", PDF_BYTES, PDF_MIME)})
    assert r.status_code == 201, r.text
    sub = r.json()
    assert sub["name"] == "case.pdf"
    assert sub["mime_type"] == PDF_MIME
    assert sub["size"] == len(PDF_BYTES)
    assert sub["size_display"] == f"{len(PDF_BYTES)} Bytes"
    assert sub["url"].endswith(sub["path"])

    listing = client.get("/api/submissions", headers=auth).json()
    assert listing["total"] == 1
    assert listing["items"][0]["id"] == sub["id"]

    one = client.get(f"/api/submissions/{sub['id']}", headers=auth)
    assert one.status_code == 200

    d = client.delete(f"/api/submissions/{sub['id']}", headers=auth)
    assert d.status_code == 200
    assert d.json() == {"deleted": sub["id"]}
    assert client.get("/api/submissions", headers=auth).json()["total"] == 0


def test_api_rejects_invalid_files(client, mailer):
    auth = make_user(client)
    r = client.post("/api/submissions", headers=auth, files={"file": ("x.png", b"\x89PNG", "image/png")})
    assert r.status_code == 400
    assert r.json()["detail"] == "Please select a PDF or PowerPoint file"


def test_api_submissions_are_scoped_to_owner(client, mailer):
    alice = make_user(client)
    bob = make_user(client)
    sub = client.post("/api/submissions", headers=alice, files={"file": ("a.pdf", PDF_BYTES, PDF_MIME)}).json()

    assert client.get("/api/submissions", headers=bob).json()["total"] == 0
    assert client.get(f"/api/submissions/{sub['id']}", headers=bob).status_code == 404
    assert client.delete(f"/api/submissions/{sub['id']}", headers=bob).status_code == 404
    assert client.get("/api/submissions", headers=alice).json()["total"] == 1

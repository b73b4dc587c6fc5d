import re

from conftest import PDF_BYTES, PDF_MIME
from portal.deps import get_object_storage
from portal.errors import StorageError
from portal.storage import ObjectStorage, get_storage
from portal.submissions import MAX_SUBMISSION_BYTES

PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


def upload(client, name, data, mime):
    return client.post("/dashboard/upload", files={"file": (name, data, mime)}, follow_redirects=False)


def delete_form(page_html, name):
    """Action URL and hidden path of the delete form next to ``name``."""
    m = re.search(
        r'>' + re.escape(name) + r'</a>.*?action="(/dashboard/submissions/\d+/delete)".*?name="path" value="([^"]+)"',
        page_html,
        re.S,
    )
    assert m, page_html
    return m.group(1), m.group(2)


def test_empty_dashboard(user_client):
    r = user_client.get("/dashboard")
    assert r.status_code == 200
    assert "No files uploaded yet" in r.text
    assert user_client.email in r.text


def test_upload_then_list_and_view(user_client):
    r = upload(user_client, "Round 1.pdf", PDF_BYTES, PDF_MIME)
    assert r.status_code == 303
    assert r.headers["location"] == "/dashboard"

    page = user_client.get("/dashboard")
    assert "Round 1.pdf" in page.text
    assert f"{len(PDF_BYTES)} Bytes" in page.text

    url = re.search(r'href="(http://testserver/storage/v1/object/public/uploads/[^"]+)"', page.text).group(1)
    obj = user_client.get(url)
    assert obj.status_code == 200
    assert obj.content == PDF_BYTES
    assert obj.headers["content-type"].startswith(PDF_MIME)


def test_newest_upload_listed_first(user_client):
    upload(user_client, "first.pdf", PDF_BYTES, PDF_MIME)
    upload(user_client, "second.pptx", b"PK\x03\x04", PPTX_MIME)
    page = user_client.get("/dashboard").text
    assert page.index("second.pptx") < page.index("first.pdf")


def test_wrong_type_is_rejected_inline(user_client):
    r = upload(user_client, "notes.txt", b"hello", "text/plain")
    assert r.status_code == 400
    assert "Please select a PDF or PowerPoint file" in r.text
    assert "No files uploaded yet" in r.text


def test_oversized_file_is_rejected(user_client):
    r = upload(user_client, "huge.pdf", b"0" * (MAX_SUBMISSION_BYTES + 1), PDF_MIME)
    assert r.status_code == 400
    assert "File size must be less than 20MB" in r.text
    assert "No files uploaded yet" in r.text


def test_empty_file_field_does_nothing(user_client):
    r = user_client.post("/dashboard/upload", files={"file": ("", b"", "application/octet-stream")}, follow_redirects=False)
    assert r.status_code == 200
    assert "No files uploaded yet" in r.text


def test_storage_failure_shows_provider_error(user_client, restore_overrides):
    upload(user_client, "kept.pdf", PDF_BYTES, PDF_MIME)

    class FullBucket(ObjectStorage):
        def upload(self, key, data, content_type=None):
            raise StorageError("The object exceeded the maximum allowed size")

    real = get_storage()
    restore_overrides[get_object_storage] = lambda: FullBucket(str(real.base), real.bucket)
    r = upload(user_client, "lost.pdf", PDF_BYTES, PDF_MIME)
    assert r.status_code == 400
    assert "The object exceeded the maximum allowed size" in r.text
    assert "kept.pdf" in r.text
    assert "lost.pdf" not in r.text


def test_delete_removes_from_list_and_storage(user_client):
    upload(user_client, "gone.pdf", PDF_BYTES, PDF_MIME)
    page = user_client.get("/dashboard").text
    action, path = delete_form(page, "gone.pdf")

    r = user_client.post(action, data={"path": path}, follow_redirects=False)
    assert r.status_code == 303
    assert "gone.pdf" not in user_client.get("/dashboard").text
    assert user_client.get(f"http://testserver/storage/v1/object/public/uploads/{path}").status_code == 404


def test_delete_failure_is_generic(user_client, restore_overrides):
    upload(user_client, "stuck.pdf", PDF_BYTES, PDF_MIME)
    action, path = delete_form(user_client.get("/dashboard").text, "stuck.pdf")

    class ReadOnly(ObjectStorage):
        def remove(self, keys):
            raise StorageError("permission denied on /srv/storage")

    real = get_storage()
    restore_overrides[get_object_storage] = lambda: ReadOnly(str(real.base), real.bucket)
    r = user_client.post(action, data={"path": path})
    assert r.status_code == 400
    assert "Failed to delete file" in r.text
    assert "permission denied" not in r.text
    assert "stuck.pdf" in r.text

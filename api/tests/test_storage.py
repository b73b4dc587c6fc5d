import pytest

from portal.errors import StorageError
from portal.storage import ObjectStorage


def make_storage(tmp_path):
    return ObjectStorage(str(tmp_path), "uploads", site_url="http://files.test")


def test_upload_and_public_url(tmp_path):
    st = make_storage(tmp_path)
    st.upload("7/1-abc.pdf", b"data", content_type="application/pdf")
    assert (tmp_path / "uploads" / "7" / "1-abc.pdf").read_bytes() == b"data"
    assert st.get_public_url("7/1-abc.pdf") == "http://files.test/storage/v1/object/public/uploads/7/1-abc.pdf"


def test_upload_refuses_existing_key(tmp_path):
    st = make_storage(tmp_path)
    st.upload("1/x.pdf", b"first")
    with pytest.raises(StorageError) as exc:
        st.upload("1/x.pdf", b"second")
    assert exc.value.message == "The resource already exists"
    assert st.open_path("1/x.pdf").read_bytes() == b"first"


@pytest.mark.parametrize("key", ["../escape.pdf", "/abs.pdf", "1/../../x.pdf", ""])
def test_keys_cannot_leave_bucket(tmp_path, key):
    st = make_storage(tmp_path)
    with pytest.raises(StorageError):
        st.upload(key, b"x")


def test_remove_skips_missing_keys(tmp_path):
    st = make_storage(tmp_path)
    st.upload("1/a.pdf", b"a")
    assert st.remove(["1/a.pdf", "1/missing.pdf"]) == ["1/a.pdf"]
    with pytest.raises(StorageError):
        st.open_path("1/a.pdf")
    assert st.remove(["1/a.pdf"]) == []


def test_upload_reports_unwritable_parent_as_storage_error(tmp_path):
    st = make_storage(tmp_path)
    # a plain file where the owner directory would go
    st.upload("9", b"not a dir")
    with pytest.raises(StorageError) as exc:
        st.upload("9/sub/a.pdf", b"x")
    assert exc.value.message.startswith("Failed to store object")

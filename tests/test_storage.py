import json

import pytest

from proofread.errors import CorruptDocumentError
from proofread.storage import JsonDocumentStore


def test_save_then_load_returns_document(tmp_path) -> None:
    store = JsonDocumentStore(tmp_path / "data")

    saved = store.save("chapter-1", "Chapter One", "Teh cat sat.", {"suggestions": [{"text": "Teh"}]})
    loaded = store.load("chapter-1")

    assert loaded is not None
    assert loaded.title == "Chapter One"
    assert loaded.content == "Teh cat sat."
    assert loaded.analysis_snapshot == {"suggestions": [{"text": "Teh"}]}
    assert loaded.updated_at == saved.updated_at


def test_saved_file_uses_camel_case_keys(tmp_path) -> None:
    store = JsonDocumentStore(tmp_path)
    store.save("doc", "Title", "Body", {})

    payload = json.loads((tmp_path / "doc.json").read_text(encoding="utf-8"))

    assert set(payload) == {"documentId", "title", "content", "analysisSnapshot", "updatedAt"}


def test_document_ids_cannot_escape_data_dir(tmp_path) -> None:
    store = JsonDocumentStore(tmp_path / "data")

    path = store.path_for("../../etc/pass wd")

    assert path.parent == tmp_path / "data"
    assert path.name == "pass_wd.json"
    with pytest.raises(ValueError):
        store.path_for("..")


def test_load_missing_document_returns_none(tmp_path) -> None:
    assert JsonDocumentStore(tmp_path).load("unknown") is None


@pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]"])
def test_load_corrupt_document_raises(tmp_path, raw) -> None:
    (tmp_path / "broken.json").write_text(raw, encoding="utf-8")

    with pytest.raises(CorruptDocumentError):
        JsonDocumentStore(tmp_path).load("broken")

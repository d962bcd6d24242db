from __future__ import annotations

from pathlib import Path

import pytest

from stamps_bulk.services.attachments import (
    AttachmentError,
    DirectoryAttachmentStore,
    MemoryAttachmentStore,
    base64_resolver,
    match_attachments,
)


def test_directory_store(tmp_path: Path):
    (tmp_path / "doc1.pdf").write_bytes(b"ABC")
    (tmp_path / "Doc2.PDF").write_bytes(b"12345")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "inner.pdf").write_bytes(b"x")

    store = DirectoryAttachmentStore(tmp_path)
    assert store.names() == ["Doc2.PDF", "doc1.pdf"]
    assert len(store) == 2
    assert store.has("doc1.pdf")
    assert not store.has("DOC1.pdf")  # case-sensitive
    assert not store.has("inner.pdf")  # non-recursive
    assert store.get("doc1.pdf") == b"ABC"
    assert store.size("Doc2.PDF") == 5


def test_directory_store_missing_dir(tmp_path: Path):
    with pytest.raises(AttachmentError):
        DirectoryAttachmentStore(tmp_path / "nope")


def test_directory_store_not_a_dir(tmp_path: Path):
    f = tmp_path / "file.txt"
    f.write_text("x", encoding="utf-8")
    with pytest.raises(AttachmentError):
        DirectoryAttachmentStore(f)


def test_base64_resolver():
    resolve = base64_resolver(MemoryAttachmentStore({"a.pdf": b"ABC"}))
    assert resolve("a.pdf") == "QUJD"
    assert resolve("missing.pdf") == ""


def test_base64_resolver_propagates_read_errors(tmp_path: Path):
    (tmp_path / "a.pdf").write_bytes(b"ABC")
    store = DirectoryAttachmentStore(tmp_path)
    (tmp_path / "a.pdf").unlink()  # 一覧取得後に削除
    with pytest.raises(OSError):
        base64_resolver(store)("a.pdf")


def test_match_attachments(record_factory):
    store = MemoryAttachmentStore({"doc1.pdf": b"1"})
    records = [
        record_factory(attachment="doc1.pdf"),
        record_factory(attachment=" doc1.pdf"),
        record_factory(attachment="missing.pdf"),
        record_factory(attachment=None),
    ]
    match = match_attachments(records, store)
    assert match.required == ["doc1.pdf", "missing.pdf"]
    assert match.matched == ["doc1.pdf"]
    assert match.missing == ["missing.pdf"]
    assert match.unused == []


def test_match_attachments_reports_unreferenced_files(record_factory):
    store = MemoryAttachmentStore({"doc1.pdf": b"1", "extra.pdf": b"2", "a-notes.txt": b"3"})
    match = match_attachments([record_factory(attachment="doc1.pdf")], store)
    assert match.unused == ["a-notes.txt", "extra.pdf"]

import asyncio
import json
from pathlib import Path

import pytest

from dealspace.errors import StorageError
from dealspace.storage import DocumentRef, FileSystemObjectStorage, JsonManifestDocumentStore


def test_manifest_store_preserves_listing_order(tmp_path: Path) -> None:
    deal_dir = tmp_path / "deal-1"
    deal_dir.mkdir()
    (deal_dir / "documents.json").write_text(
        json.dumps(
            [
                {"id": "2", "name": "Zeta.pdf", "file_path": "deal-1/zeta.pdf", "content_type": "application/pdf"},
                {"id": "1", "name": "Alpha.txt", "storage_path": "deal-1/alpha.txt"},
            ]
        ),
        encoding="utf-8",
    )

    documents = asyncio.run(JsonManifestDocumentStore(tmp_path).list_documents("deal-1"))

    assert documents == [
        DocumentRef(id="2", name="Zeta.pdf", storage_path="deal-1/zeta.pdf", declared_content_type="application/pdf"),
        DocumentRef(id="1", name="Alpha.txt", storage_path="deal-1/alpha.txt"),
    ]


def test_missing_manifest_means_no_documents(tmp_path: Path) -> None:
    assert asyncio.run(JsonManifestDocumentStore(tmp_path).list_documents("unknown")) == []


def test_malformed_manifest_raises_storage_error(tmp_path: Path) -> None:
    (tmp_path / "deal-1").mkdir()
    (tmp_path / "deal-1" / "documents.json").write_text("[{\"name\": \"x\"}]", encoding="utf-8")

    with pytest.raises(StorageError, match="Failed to fetch documents"):
        asyncio.run(JsonManifestDocumentStore(tmp_path).list_documents("deal-1"))


def test_filesystem_storage_reads_bytes(tmp_path: Path) -> None:
    (tmp_path / "deal-1").mkdir()
    (tmp_path / "deal-1" / "memo.txt").write_bytes(b"memo")

    assert asyncio.run(FileSystemObjectStorage(tmp_path).download("deal-1/memo.txt")) == b"memo"


def test_filesystem_storage_missing_object(tmp_path: Path) -> None:
    with pytest.raises(StorageError, match="Object not found"):
        asyncio.run(FileSystemObjectStorage(tmp_path).download("deal-1/missing.txt"))


def test_filesystem_storage_rejects_traversal(tmp_path: Path) -> None:
    with pytest.raises(StorageError, match="escapes"):
        asyncio.run(FileSystemObjectStorage(tmp_path / "root").download("../secret.txt"))


def test_filesystem_storage_rejects_nul_byte_path(tmp_path: Path) -> None:
    with pytest.raises(StorageError, match="Invalid storage path"):
        asyncio.run(FileSystemObjectStorage(tmp_path).download("deal-1/a\x00b.txt"))

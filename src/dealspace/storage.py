"""Document metadata and object storage collaborators."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Final, List, Mapping, Protocol, Sequence

from dealspace.errors import StorageError

LOGGER = logging.getLogger(__name__)

MANIFEST_NAME: Final[str] = "documents.json"


@dataclass(frozen=True, slots=True)
class DocumentRef:
    """A stored document attached to a deal."""

    id: str
    name: str
    storage_path: str
    declared_content_type: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, object]) -> "DocumentRef":
        storage_path = record.get("storage_path") or record.get("file_path")
        if not record.get("id") or not record.get("name") or not storage_path:
            raise ValueError(f"Incomplete document record: {dict(record)!r}")
        content_type = record.get("content_type") or record.get("declared_content_type")
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            storage_path=str(storage_path),
            declared_content_type=str(content_type) if content_type else None,
        )


class DocumentMetadataStore(Protocol):
    async def list_documents(self, deal_id: str) -> List[DocumentRef]:
        """Return the deal's documents in listing order."""
        ...


class ObjectStorage(Protocol):
    async def download(self, storage_path: str) -> bytes:
        """Return the stored bytes or raise :class:`StorageError`."""
        ...


def _resolve_within(root: Path, relative: str) -> Path:
    """Resolve ``relative`` under ``root`` rejecting paths that escape it."""

    base = root.resolve()
    try:
        candidate = (base / relative).resolve()
    except (ValueError, OSError) as exc:
        raise StorageError(f"Invalid storage path: {relative!r}", cause=exc) from exc
    if candidate != base and base not in candidate.parents:
        raise StorageError(f"Storage path escapes the storage root: {relative}")
    return candidate


class FileSystemObjectStorage:
    """Object storage backed by a local directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    async def download(self, storage_path: str) -> bytes:
        path = _resolve_within(self.root, storage_path)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise StorageError(f"Object not found: {storage_path}", cause=exc) from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {storage_path}: {exc}", cause=exc) from exc


class JsonManifestDocumentStore:
    """Reads ``<root>/<deal_id>/documents.json`` manifests.

    Each manifest is a JSON list of ``{id, name, file_path, content_type}``
    records in the order the documents were listed for the deal.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    async def list_documents(self, deal_id: str) -> List[DocumentRef]:
        manifest = _resolve_within(self.root, f"{deal_id}/{MANIFEST_NAME}")
        if not manifest.exists():
            LOGGER.info("No document manifest for deal %s", deal_id)
            return []
        try:
            records = json.loads(manifest.read_text(encoding="utf-8"))
            return [DocumentRef.from_record(record) for record in records]
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            raise StorageError("Failed to fetch documents", cause=exc) from exc


class InMemoryDocumentStore:
    """Metadata store holding documents in a dict keyed by deal id."""

    def __init__(self, documents: Mapping[str, Sequence[DocumentRef]] | None = None) -> None:
        self._documents: Dict[str, List[DocumentRef]] = {
            deal_id: list(refs) for deal_id, refs in (documents or {}).items()
        }

    def add(self, deal_id: str, document: DocumentRef) -> None:
        self._documents.setdefault(deal_id, []).append(document)

    async def list_documents(self, deal_id: str) -> List[DocumentRef]:
        return list(self._documents.get(deal_id, []))


class InMemoryObjectStorage:
    """Object storage keeping payloads in memory."""

    def __init__(self, objects: Mapping[str, bytes] | None = None) -> None:
        self._objects: Dict[str, bytes] = dict(objects or {})

    def put(self, storage_path: str, data: bytes) -> None:
        self._objects[storage_path] = data

    async def download(self, storage_path: str) -> bytes:
        try:
            return self._objects[storage_path]
        except KeyError as exc:
            raise StorageError(f"Object not found: {storage_path}", cause=exc) from exc

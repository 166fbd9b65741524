"""
Calculation history storage.

Provides:
- HistoryStore: append / list / update actuals / remove / clear
- Storage backends holding the entry list as one JSON document:
  in-memory, local JSON file, Azure Blob Storage
- CSV export of the history for spreadsheet use

The store is the only writer of history entries. It assumes a single
writer and saves the whole list on every change (last write wins).

Dependencies:
- Standard library only for memory and local file storage.
- For Azure Blob: `azure-storage-blob` package is required.
"""

from __future__ import annotations

import csv
from dataclasses import replace
import json
import logging
from pathlib import Path
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional
import uuid

from .config import Config, get_config
from .schema import (
    ACTUAL_FIELDS,
    CocomoCalculationResult,
    FPCalculationResult,
    HistoryEntry,
)
from .validation import InvalidInputError, validate_actual_value

try:
    from azure.core.exceptions import ResourceNotFoundError  # type: ignore[import]
    from azure.storage.blob import BlobServiceClient  # type: ignore[import]
except ImportError:  # pragma: no cover - optional dependency
    BlobServiceClient = None  # type: ignore[assignment]
    ResourceNotFoundError = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

# Stored key -> dataclass attribute for the actual-value fields
_ACTUAL_ATTRS = {
    "actualAfp": "actual_afp",
    "actualEffort": "actual_effort",
    "actualDevTime": "actual_dev_time",
}


class HistoryEntryNotFound(KeyError):
    """Raised when no history entry has the requested id."""


# --- Backends ----------------------------------------------------------------


class MemoryBackend:
    """Keeps the serialized history in process memory. Useful for tests."""

    def __init__(self, entries: Optional[List[Dict[str, Any]]] = None) -> None:
        self._raw = json.dumps(entries or [])

    def read(self) -> List[Dict[str, Any]]:
        return json.loads(self._raw)

    def write(self, entries: List[Dict[str, Any]]) -> None:
        self._raw = json.dumps(entries)


class JsonFileBackend:
    """Stores the history as a JSON list in a local file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8")
        if not text.strip():
            return []
        return json.loads(text)

    def write(self, entries: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(entries, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)


def _get_blob_service(config: Optional[Config] = None):
    if BlobServiceClient is None:
        raise ImportError(
            "azure-storage-blob is required for Azure Blob operations. "
            "Install via `pip install azure-storage-blob`."
        )
    cfg = config or get_config()
    if not cfg.azure_blob_connection_string:
        raise ValueError(
            "Azure blob connection string is not configured. "
            "Set EE_AZURE_BLOB_CONNECTION_STRING or pass Config explicitly."
        )
    return BlobServiceClient.from_connection_string(
        cfg.azure_blob_connection_string
    ), cfg


class AzureBlobBackend:
    """
    Stores the history as a JSON blob in Azure Blob Storage.

    - blob_name: name of the blob (e.g., 'estimation/history.json')
    - container_name: overrides Config.azure_blob_container_name if provided
    """

    def __init__(
        self,
        blob_name: str,
        *,
        container_name: Optional[str] = None,
        config: Optional[Config] = None,
    ) -> None:
        service_client, cfg = _get_blob_service(config)
        container = container_name or cfg.azure_blob_container_name
        if not container:
            raise ValueError(
                "Azure blob container name is not configured. "
                "Set EE_AZURE_BLOB_CONTAINER_NAME or pass container_name."
            )
        self.blob_client = service_client.get_blob_client(
            container=container, blob=blob_name
        )

    def read(self) -> List[Dict[str, Any]]:
        try:
            download_stream = self.blob_client.download_blob()
        except ResourceNotFoundError:
            return []
        return json.loads(download_stream.readall().decode("utf-8"))

    def write(self, entries: List[Dict[str, Any]]) -> None:
        payload = json.dumps(entries).encode("utf-8")
        self.blob_client.upload_blob(payload, overwrite=True)


def backend_from_config(config: Optional[Config] = None):
    """Build the storage backend named by Config.history_backend."""
    cfg = config or get_config()
    if cfg.history_backend == "memory":
        return MemoryBackend()
    if cfg.history_backend == "azure":
        return AzureBlobBackend(cfg.history_blob_name, config=cfg)
    if cfg.history_backend == "file":
        return JsonFileBackend(cfg.history_path)
    raise ValueError(
        f"Unknown history backend {cfg.history_backend!r}. "
        "Use 'file', 'azure' or 'memory'."
    )


# --- Store -------------------------------------------------------------------


def _now_ms() -> int:
    return int(time.time() * 1000)


class HistoryStore:
    """
    Saved calculations, in insertion order.

    Consumers that need chronological order sort by timestamp themselves.
    """

    def __init__(self, backend=None) -> None:
        self.backend = backend if backend is not None else MemoryBackend()

    def _load(self) -> List[HistoryEntry]:
        return [HistoryEntry.from_dict(raw) for raw in self.backend.read()]

    def _save(self, entries: Iterable[HistoryEntry]) -> None:
        self.backend.write([entry.to_dict() for entry in entries])

    def list(self) -> List[HistoryEntry]:
        return self._load()

    def get(self, entry_id: str) -> HistoryEntry:
        for entry in self._load():
            if entry.id == entry_id:
                return entry
        raise HistoryEntryNotFound(entry_id)

    def append(self, entry: HistoryEntry) -> HistoryEntry:
        entries = self._load()
        if any(existing.id == entry.id for existing in entries):
            raise InvalidInputError(f"History entry id {entry.id!r} already exists")
        entries.append(entry)
        self._save(entries)
        logger.info("Saved %s entry %s", entry.type, entry.id)
        return entry

    def save_fp(
        self,
        result: FPCalculationResult,
        *,
        timestamp: Optional[int] = None,
    ) -> HistoryEntry:
        """Wrap an FP result in a new entry and append it."""
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            type="FP",
            timestamp=timestamp if timestamp is not None else _now_ms(),
            data=result,
        )
        return self.append(entry)

    def save_cocomo(
        self,
        result: CocomoCalculationResult,
        *,
        timestamp: Optional[int] = None,
    ) -> HistoryEntry:
        """Wrap a COCOMO result in a new entry and append it."""
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            type="COCOMO",
            timestamp=timestamp if timestamp is not None else _now_ms(),
            data=result,
        )
        return self.append(entry)

    def update_actuals(
        self,
        entry_id: str,
        actuals: Mapping[str, Optional[float]],
    ) -> HistoryEntry:
        """
        Attach or clear actual outcomes on an entry.

        Keys use the stored names: actualAfp for FP entries, actualEffort
        and actualDevTime for COCOMO entries. A None value removes the
        field. Nothing else on the entry changes.
        """
        entries = self._load()
        for index, entry in enumerate(entries):
            if entry.id != entry_id:
                continue

            allowed = ACTUAL_FIELDS[entry.type]
            invalid = sorted(set(actuals) - set(allowed))
            if invalid:
                raise InvalidInputError(
                    f"{entry.type} entries accept {', '.join(allowed)}; "
                    f"got {', '.join(invalid)}"
                )

            changes = {
                _ACTUAL_ATTRS[key]: validate_actual_value(key, value)
                for key, value in actuals.items()
            }
            updated = replace(entry, data=replace(entry.data, **changes))
            entries[index] = updated
            self._save(entries)
            logger.info("Updated actuals on entry %s: %s", entry_id, sorted(actuals))
            return updated

        raise HistoryEntryNotFound(entry_id)

    def remove(self, entry_id: str) -> None:
        entries = self._load()
        remaining = [entry for entry in entries if entry.id != entry_id]
        if len(remaining) == len(entries):
            raise HistoryEntryNotFound(entry_id)
        self._save(remaining)
        logger.info("Removed entry %s", entry_id)

    def clear(self) -> None:
        self._save([])
        logger.info("Cleared history")


# --- CSV export --------------------------------------------------------------

CSV_FIELDNAMES = [
    "id",
    "type",
    "timestamp",
    "fileName",
    "ufp",
    "vaf",
    "afp",
    "actualAfp",
    "ksloc",
    "effort",
    "devTime",
    "actualEffort",
    "actualDevTime",
]


def export_history_csv(entries: Iterable[HistoryEntry], path: str) -> None:
    """
    Save history entries to a CSV file, one row per entry.

    Columns that do not apply to an entry's type are left empty.
    """
    with open(path, mode="w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for entry in entries:
            row: Dict[str, Any] = {
                "id": entry.id,
                "type": entry.type,
                "timestamp": entry.timestamp,
            }
            data = entry.data.to_dict()
            if entry.type == "COCOMO":
                row["ksloc"] = data["inputs"]["ksloc"]
            row.update({k: v for k, v in data.items() if k in CSV_FIELDNAMES})
            writer.writerow({key: row.get(key) for key in CSV_FIELDNAMES})

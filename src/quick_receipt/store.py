"""Receipt store abstraction and local JSON document implementation."""

from __future__ import annotations

import logging
import os
import tempfile
from typing import TYPE_CHECKING, Protocol

from pydantic import TypeAdapter, ValidationError
from slugify import slugify

from quick_receipt.config import STORE_NAMESPACE
from quick_receipt.errors import PersistenceError
from quick_receipt.models import ReceiptRecord

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_RECORDS = TypeAdapter(list[ReceiptRecord])


class ReceiptStore(Protocol):
    """Protocol for append-only receipt storage backends."""

    def append(self, record: ReceiptRecord) -> None: ...

    def list_all(self) -> list[ReceiptRecord]: ...


class LocalReceiptStore:
    """Local filesystem implementation of ReceiptStore.

    The whole collection lives in one JSON document,
    ``{root}/{namespace-slug}.json``, which is read in full and rewritten
    in full on every append. Overlapping appends are last-write-wins.
    """

    def __init__(self, root: Path, namespace: str = STORE_NAMESPACE) -> None:
        self.root = root
        self.namespace = namespace

    @property
    def path(self) -> Path:
        """Location of the backing JSON document."""
        return self.root / f"{slugify(self.namespace)}.json"

    def list_all(self) -> list[ReceiptRecord]:
        """Return every stored record in insertion order."""
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            msg = f"Could not read receipt store {self.path}: {exc}"
            raise PersistenceError(msg) from exc

        if not raw.strip():
            return []

        try:
            return _RECORDS.validate_json(raw)
        except ValidationError as exc:
            msg = f"Receipt store {self.path} is corrupt: {exc}"
            raise PersistenceError(msg) from exc

    def append(self, record: ReceiptRecord) -> None:
        """Load the collection, add ``record`` and write the collection back."""
        records = self.list_all()
        if any(existing.id == record.id for existing in records):
            msg = f"Receipt {record.id} is already stored"
            raise PersistenceError(msg)

        records.append(record)
        self._write(records)
        logger.debug("Stored receipt %s (%d total)", record.id, len(records))

    def _write(self, records: list[ReceiptRecord]) -> None:
        """Replace the backing document without exposing a partial write."""
        try:
            payload = _RECORDS.dump_json(records, by_alias=True, indent=2)
        except (ValueError, TypeError) as exc:
            msg = f"Could not serialize receipts: {exc}"
            raise PersistenceError(msg) from exc

        tmp_name: str | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.root, prefix=f".{self.path.stem}-", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            msg = f"Could not write receipt store {self.path}: {exc}"
            raise PersistenceError(msg) from exc

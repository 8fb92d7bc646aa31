# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""Issuer-side credential revocation registry.

The registry maps credential ids to :class:`~types.RevocationEntry` records.
Entries only ever move from ``active`` to ``revoked`` and are never removed.

When constructed with a path, the registry loads that JSON file on startup
and rewrites it in full after every ``register``/``revoke``. The file is an
object keyed by credential id::

    {
      "urn:uuid:...": {
        "credentialId": "urn:uuid:...",
        "issuerDid": "did:key:z...",
        "subjectDid": "did:key:z...",
        "status": "revoked",
        "issuedAt": "2026-01-01T00:00:00.000000+00:00",
        "revokedAt": "2026-02-01T00:00:00.000000+00:00",
        "reason": "fraud detected"
      }
    }

Thread safety: any number of concurrent readers; ``register`` and
``revoke`` are exclusive and hold the lock while the file is rewritten.
"""

from __future__ import annotations

import contextlib
import dataclasses
import json
import logging
import os
import stat
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from . import config
from .tokens import parse_timestamp
from .types import (
    AlreadyRevokedError,
    EntryNotFoundError,
    PersistenceIOError,
    RevocationEntry,
    RevocationStatus,
)

log = logging.getLogger(__name__)

_DEFAULT_FILE_MODE = 0o644


def generate_credential_id() -> str:
    """Return a fresh ``urn:uuid:`` credential id."""
    return f"urn:uuid:{uuid.uuid4()}"


class _ReadWriteLock:
    """Shared/exclusive lock. Waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextlib.contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class RevocationRegistry:
    """Tracks the active/revoked status of issued credentials.

    Parameters
    ----------
    path:
        Optional JSON file mirroring the registry. Loaded if it exists,
        created on the first mutation otherwise.

    Raises
    ------
    PersistenceIOError
        If *path* exists but cannot be read or does not hold valid registry
        state.
    """

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self._lock = _ReadWriteLock()
        self._entries: dict[str, RevocationEntry] = {}
        self._path = Path(path) if path is not None else None

        if self._path is not None and self._path.exists():
            self._entries = _load_entries(self._path)
            log.info(f"Loaded {len(self._entries)} revocation entries from {self._path}")

    @classmethod
    def open(cls, path: str | os.PathLike[str] | None = None) -> "RevocationRegistry":
        """Open a file-backed registry, defaulting to ``config.REGISTRY_PATH``."""
        return cls(path if path is not None else config.REGISTRY_PATH)

    @property
    def path(self) -> Path | None:
        return self._path

    def register(self, credential_id: str, issuer_did: str, subject_did: str) -> None:
        """Record a newly issued credential as active.

        An existing entry with the same id is replaced. Callers are expected
        to use globally unique ids (see :func:`generate_credential_id`).

        Raises
        ------
        PersistenceIOError
            If the backing file cannot be written. The entry is registered
            in memory regardless.
        """
        entry = RevocationEntry(
            credential_id=credential_id,
            issuer_did=issuer_did,
            subject_did=subject_did,
            status=RevocationStatus.ACTIVE,
            issued_at=datetime.now(tz=timezone.utc),
        )
        with self._lock.write():
            if credential_id in self._entries:
                log.warning(f"Overwriting existing revocation entry {credential_id}")
            self._entries[credential_id] = entry
            log.info(f"Registered credential {credential_id} issued by {issuer_did}")
            self._save()

    def revoke(self, credential_id: str, reason: str) -> None:
        """Mark a registered credential as revoked.

        Raises
        ------
        EntryNotFoundError
            If *credential_id* was never registered.
        AlreadyRevokedError
            If the credential is already revoked.
        PersistenceIOError
            If the backing file cannot be written. The revocation is applied
            in memory regardless.
        """
        with self._lock.write():
            entry = self._entries.get(credential_id)
            if entry is None:
                raise EntryNotFoundError(credential_id)
            if entry.is_revoked:
                raise AlreadyRevokedError(credential_id)

            self._entries[credential_id] = dataclasses.replace(
                entry,
                status=RevocationStatus.REVOKED,
                revoked_at=datetime.now(tz=timezone.utc),
                reason=reason,
            )
            log.info(f"Revoked credential {credential_id}: {reason}")
            self._save()

    def check_status(self, credential_id: str) -> RevocationEntry:
        """Return the entry for *credential_id*.

        Raises
        ------
        EntryNotFoundError
            If *credential_id* is not registered.
        """
        with self._lock.read():
            entry = self._entries.get(credential_id)
        if entry is None:
            raise EntryNotFoundError(credential_id)
        return entry

    def is_revoked(self, credential_id: str) -> bool:
        """Return whether *credential_id* is revoked; raises ``EntryNotFoundError``."""
        return self.check_status(credential_id).is_revoked

    def list_by_issuer(self, issuer_did: str) -> list[RevocationEntry]:
        """All entries issued by *issuer_did*, in no particular order."""
        with self._lock.read():
            return [e for e in self._entries.values() if e.issuer_did == issuer_did]

    def list_by_subject(self, subject_did: str) -> list[RevocationEntry]:
        """All entries about *subject_did*, in no particular order."""
        with self._lock.read():
            return [e for e in self._entries.values() if e.subject_did == subject_did]

    def export(self) -> bytes:
        """Serialize every entry as the JSON object used by the backing file."""
        with self._lock.read():
            return _dump_entries(self._entries)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, credential_id: object) -> bool:
        with self._lock.read():
            return credential_id in self._entries

    def _save(self) -> None:
        """Rewrite the backing file. Caller must hold the write lock."""
        if self._path is None:
            return

        data = _dump_entries(self._entries)
        directory = self._path.parent
        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb", dir=directory, prefix=f".{self._path.name}.", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_name, _file_mode(self._path))
            os.replace(tmp_name, self._path)
        except OSError as exc:
            log.warning(f"Failed to persist revocation registry to {self._path}: {exc}")
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise PersistenceIOError(
                f"failed to write revocation registry {self._path}: {exc}"
            ) from exc


def _file_mode(path: Path) -> int:
    """Permission bits to give a rewrite of *path*: its current mode, else 0644."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return _DEFAULT_FILE_MODE


# ------------------------------------------------------------------
# File format
# ------------------------------------------------------------------


def _entry_to_dict(entry: RevocationEntry) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "credentialId": entry.credential_id,
        "issuerDid": entry.issuer_did,
        "subjectDid": entry.subject_did,
        "status": entry.status.value,
        "issuedAt": entry.issued_at.isoformat(),
    }
    if entry.revoked_at is not None:
        doc["revokedAt"] = entry.revoked_at.isoformat()
    if entry.reason:
        doc["reason"] = entry.reason
    return doc


def _entry_from_dict(raw: object) -> RevocationEntry:
    if not isinstance(raw, dict):
        raise ValueError(f"entry must be an object, got {type(raw).__name__}")

    status = RevocationStatus(raw["status"])
    revoked_at = raw.get("revokedAt")
    # Writers that cannot omit an unset time emit the zero time (year 1).
    revoked = parse_timestamp(str(revoked_at)) if revoked_at else None
    if revoked is not None and (status is RevocationStatus.ACTIVE or revoked.year == 1):
        revoked = None
    return RevocationEntry(
        credential_id=str(raw["credentialId"]),
        issuer_did=str(raw["issuerDid"]),
        subject_did=str(raw["subjectDid"]),
        status=status,
        issued_at=parse_timestamp(str(raw["issuedAt"])),
        revoked_at=revoked,
        reason=str(raw.get("reason", "")),
    )


def _dump_entries(entries: dict[str, RevocationEntry]) -> bytes:
    doc = {cid: _entry_to_dict(entry) for cid, entry in entries.items()}
    return json.dumps(doc, indent=2).encode("utf-8")


def _load_entries(path: Path) -> dict[str, RevocationEntry]:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise PersistenceIOError(f"failed to read revocation registry {path}: {exc}") from exc

    if not data.strip():
        return {}

    try:
        raw = json.loads(data)
        if not isinstance(raw, dict):
            raise ValueError("registry file must hold a JSON object")
        return {str(cid): _entry_from_dict(value) for cid, value in raw.items()}
    except (KeyError, TypeError, ValueError) as exc:
        raise PersistenceIOError(f"invalid revocation registry {path}: {exc}") from exc

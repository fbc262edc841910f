"""Persistence backends for run manifests."""

from __future__ import annotations

from slip_splitter.persistence.file_backend import FilePersistenceBackend
from slip_splitter.persistence.protocols import IPersistenceBackend

__all__ = ["IPersistenceBackend", "FilePersistenceBackend"]

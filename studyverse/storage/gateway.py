"""Persistence gateway - string-keyed store of whole JSON documents.

There are no transactions and no locking: a write replaces the whole
document. Reads never raise on bad data; a document that cannot be parsed,
or that is not the expected JSON container, is reported as absent. A write
the backing store refuses raises PersistenceWriteError.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from studyverse.errors import PersistenceReadError, PersistenceWriteError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class PersistenceGateway:
    """Base gateway. Subclasses provide raw text access by key."""

    def _read_raw(self, key: str) -> str | None:
        raise NotImplementedError

    def _write_raw(self, key: str, text: str) -> None:
        raise NotImplementedError

    def read(self, key: str, expected: type = dict) -> Any:
        """
        Read and decode a document.

        Args:
            key: Document key
            expected: JSON container type the caller needs (dict or list)

        Returns:
            Decoded document, or None when missing or malformed
        """
        raw = self._read_raw(key)
        if raw is None:
            return None

        try:
            return self._decode(key, raw, expected)
        except PersistenceReadError as e:
            logger.warning("Ignoring stored document %s: %s", key, e)
            return None

    def write(self, key: str, document: Any) -> None:
        """
        Serialize and store a whole document under ``key``.

        Raises:
            PersistenceWriteError: The backing store refused the write
        """
        text = json.dumps(document, ensure_ascii=False)
        try:
            self._write_raw(key, text)
        except OSError as e:
            logger.error("Could not write %s: %s", key, e)
            raise PersistenceWriteError(f"could not write {key}: {e}") from e
        logger.debug("Document saved: %s", key)

    @staticmethod
    def _decode(key: str, raw: str, expected: type) -> Any:
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise PersistenceReadError(f"invalid JSON in {key}: {e}") from e

        if not isinstance(data, expected):
            raise PersistenceReadError(
                f"expected {expected.__name__} in {key}, got {type(data).__name__}"
            )
        return data


class InMemoryGateway(PersistenceGateway):
    """Gateway backed by a dict of serialized documents."""

    def __init__(self, documents: dict[str, str] | None = None):
        self.documents: dict[str, str] = dict(documents or {})

    def _read_raw(self, key: str) -> str | None:
        return self.documents.get(key)

    def _write_raw(self, key: str, text: str) -> None:
        self.documents[key] = text


class JsonFileGateway(PersistenceGateway):
    """Gateway storing each document as ``<directory>/<key>.json``."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{_SAFE_KEY.sub('_', key)}.json"

    def _read_raw(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def _write_raw(self, key: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        # Readers only ever see a complete document
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(text, encoding="utf-8")
        tmp_path.replace(path)

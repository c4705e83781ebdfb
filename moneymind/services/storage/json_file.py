"""
JSON File Storage Implementation

DESIGN DECISION: The database is one JSON document on disk, with the user
database stored under a versioned key (e.g. "MoneyMindDB_v7"). Bumping the
key starts a fresh database without touching the old one.

TRADEOFFS:
- The whole record is rewritten on every save (fine for one person's data)
- Writes go to a temporary file that replaces the original, so a crash
  mid-write leaves the previous record intact
- Unreadable records are replaced with an empty default rather than
  crashing the app; the problem is logged
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from moneymind.config import get_settings
from moneymind.models.finance import UserDatabase
from moneymind.services.storage.interface import (
    CorruptDataError,
    DatabaseStorageInterface,
    StorageWriteError,
)


class JsonFileStorage(DatabaseStorageInterface):
    """
    Stores the user database as JSON in a single file.

    Other top-level keys found in the file are preserved on save.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        database_key: Optional[str] = None,
    ):
        settings = get_settings().storage
        self._path = Path(path) if path is not None else settings.data_path
        self._key = database_key or settings.database_key
        self._logger = structlog.get_logger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def database_key(self) -> str:
        return self._key

    def _read_document(self) -> dict:
        """Read the whole JSON document; an absent file is an empty one."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise CorruptDataError(f"Cannot read {self._path}: {e}")

        if not raw.strip():
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Invalid JSON in {self._path}: {e}")

        if not isinstance(document, dict):
            raise CorruptDataError(f"Expected a JSON object in {self._path}")
        return document

    def load(self) -> UserDatabase:
        try:
            record = self._read_document().get(self._key)
            if record is None:
                return UserDatabase()
            return UserDatabase.model_validate(record)
        except (CorruptDataError, ValidationError) as e:
            self._logger.warning(
                "database_replaced_with_default",
                path=str(self._path),
                database_key=self._key,
                error=str(e),
            )
            return UserDatabase()

    def save(self, database: UserDatabase) -> None:
        try:
            document = self._read_document()
        except CorruptDataError:
            # The unreadable content is already lost to load(); overwrite it.
            document = {}
        document[self._key] = database.model_dump(mode="json")

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self._path}: {e}")

        self._logger.debug(
            "database_saved",
            path=str(self._path),
            users=len(database.users),
        )

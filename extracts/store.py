"""
Extract storage.

An extract is a directory named after its id holding a ``config.json``
plus the files the lifecycle manager writes into it. The store owns the
directories and the config record; it never touches any other file content.

``FilesystemExtractStore`` is the production implementation.
``InMemoryExtractStore`` keeps configs in a dict and only uses the disk for
the working directories the manager writes artifacts into.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError

from config import CONFIG_FILE_NAME, get_containers_path
from core.exceptions import (
    CorruptConfigError,
    ExtractAlreadyExistsError,
    ExtractNotFoundError,
)
from extracts.models import ExtractConfig, validate_path_component

logger = logging.getLogger(__name__)


class ExtractStore(ABC):
    """Contract for mapping an extract id to a directory and a config."""

    @abstractmethod
    def path_for(self, extract_id: str) -> Path:
        """Directory of an extract; does not check that it exists."""

    @abstractmethod
    def exists(self, extract_id: str) -> bool:
        """True iff the extract's directory is present and non-empty."""

    @abstractmethod
    def create(self, extract_id: str) -> Path:
        """
        Allocate the directory for a new extract.

        Raises:
            ExtractAlreadyExistsError: If a non-empty directory is already there
        """

    @abstractmethod
    def read_config(self, extract_id: str) -> ExtractConfig:
        """
        Load the persisted config.

        Raises:
            ExtractNotFoundError: If no config has been written
            CorruptConfigError: If the record cannot be decoded
        """

    @abstractmethod
    def write_config(self, extract_id: str, config: ExtractConfig) -> None:
        """Persist the config; allowed once per extract lifetime."""

    @abstractmethod
    def delete(self, extract_id: str) -> None:
        """Remove the extract and everything in it."""

    @abstractmethod
    def list_ids(self) -> list[str]:
        """Ids of all extract directories, in storage order."""


class FilesystemExtractStore(ExtractStore):
    """Stores each extract as ``<root>/<id>/config.json``."""

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root if root is not None else get_containers_path())

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, extract_id: str) -> Path:
        validate_path_component(extract_id, "id")
        return self._root / extract_id

    def exists(self, extract_id: str) -> bool:
        directory = self.path_for(extract_id)
        if not directory.is_dir():
            return False
        return any(directory.iterdir())

    def create(self, extract_id: str) -> Path:
        directory = self.path_for(extract_id)
        if self.exists(extract_id):
            msg = f"Extract {extract_id} already exists"
            raise ExtractAlreadyExistsError(msg, {"id": extract_id})
        # exist_ok: a concurrent create of the same id ends with one directory
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("Created extract directory at: %s", directory)
        return directory

    def _config_path(self, extract_id: str) -> Path:
        return self.path_for(extract_id) / CONFIG_FILE_NAME

    def read_config(self, extract_id: str) -> ExtractConfig:
        config_path = self._config_path(extract_id)
        try:
            raw = config_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            msg = f"No config found for extract {extract_id}"
            raise ExtractNotFoundError(msg, {"id": extract_id}) from exc

        try:
            return ExtractConfig.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.exception("Config for extract %s is unreadable", extract_id)
            msg = f"Config for extract {extract_id} is corrupt: {exc}"
            raise CorruptConfigError(msg, {"id": extract_id}) from exc

    def write_config(self, extract_id: str, config: ExtractConfig) -> None:
        config_path = self._config_path(extract_id)
        if config_path.exists():
            msg = f"Config for extract {extract_id} was already written"
            raise ExtractAlreadyExistsError(msg, {"id": extract_id})

        temp_path = config_path.with_name(f"{CONFIG_FILE_NAME}.tmp")
        logger.info("Writing config file at: %s", config_path)
        temp_path.write_text(config.to_json(), encoding="utf-8")
        os.replace(temp_path, config_path)

    def delete(self, extract_id: str) -> None:
        directory = self.path_for(extract_id)
        if not directory.is_dir():
            msg = f"Extract {extract_id} does not exist"
            raise ExtractNotFoundError(msg, {"id": extract_id})
        shutil.rmtree(directory)
        logger.info("Deleted extract directory: %s", directory)

    def list_ids(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return [entry.name for entry in self._root.iterdir() if entry.is_dir()]


class InMemoryExtractStore(ExtractStore):
    """
    Keeps configs in memory.

    Working directories are still created under ``scratch_root`` because the
    external tools need real files to operate on.
    """

    def __init__(self, scratch_root: str | Path) -> None:
        self._scratch_root = Path(scratch_root)
        self._configs: dict[str, ExtractConfig] = {}
        self._created: set[str] = set()

    def path_for(self, extract_id: str) -> Path:
        validate_path_component(extract_id, "id")
        return self._scratch_root / extract_id

    def exists(self, extract_id: str) -> bool:
        if extract_id in self._configs:
            return True
        directory = self.path_for(extract_id)
        return directory.is_dir() and any(directory.iterdir())

    def create(self, extract_id: str) -> Path:
        if self.exists(extract_id):
            msg = f"Extract {extract_id} already exists"
            raise ExtractAlreadyExistsError(msg, {"id": extract_id})
        directory = self.path_for(extract_id)
        directory.mkdir(parents=True, exist_ok=True)
        self._created.add(extract_id)
        return directory

    def read_config(self, extract_id: str) -> ExtractConfig:
        try:
            return self._configs[extract_id]
        except KeyError as exc:
            msg = f"No config found for extract {extract_id}"
            raise ExtractNotFoundError(msg, {"id": extract_id}) from exc

    def write_config(self, extract_id: str, config: ExtractConfig) -> None:
        if extract_id in self._configs:
            msg = f"Config for extract {extract_id} was already written"
            raise ExtractAlreadyExistsError(msg, {"id": extract_id})
        self._configs[extract_id] = config

    def delete(self, extract_id: str) -> None:
        if extract_id not in self._created and extract_id not in self._configs:
            msg = f"Extract {extract_id} does not exist"
            raise ExtractNotFoundError(msg, {"id": extract_id})
        self._configs.pop(extract_id, None)
        self._created.discard(extract_id)
        shutil.rmtree(self.path_for(extract_id), ignore_errors=True)

    def list_ids(self) -> list[str]:
        return sorted(self._created | set(self._configs))

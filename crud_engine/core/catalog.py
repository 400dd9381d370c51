"""
Schema catalog: durable store of model definitions.

Definitions live in memory for lookups on every request and on disk as
one ``<name>.json`` file per model. Writers persist first and publish
second: the file is written to a temporary sibling, fsynced and renamed
into place, and only then is a new index dict swapped in. A failed write
leaves both disk and memory at the previous state.

Readers never lock; the index dict is replaced wholesale and definitions
are immutable, so a reader sees either the old or the new definition.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..constants import DEFINITION_FILE_SUFFIX, MODEL_NAME_PATTERN
from ..exceptions import ConflictError, ModelDefinitionError, NotFoundError, StorageError
from ..observability import get_logger as get_contextual_logger
from ..observability import log_operation, record_operation
from .definitions import ModelDefinition
from .schema import ensure_valid_definition

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)


class SchemaCatalog:
    """
    In-memory index of ModelDefinitions backed by a directory of JSON files.

    Example:
        catalog = SchemaCatalog("models")
        catalog.load()
        task = catalog.register({"name": "Task", "fields": [...], "rbac": {...}})
        catalog.get("Task").table_name   # "tasks"
    """

    def __init__(self, models_dir: str | os.PathLike) -> None:
        """
        Args:
            models_dir: Directory holding the definition files (created if missing)
        """
        self.models_dir = Path(models_dir)
        self._models: dict[str, ModelDefinition] = {}
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find(self, name: str) -> ModelDefinition | None:
        return self._models.get(name)

    def get(self, name: str) -> ModelDefinition:
        """
        Look up a definition by name.

        Raises:
            NotFoundError: If no model with that name is registered
        """
        model = self._models.get(name)
        if model is None:
            raise NotFoundError(f"Model {name} not found", model_name=name)
        return model

    def list(self) -> list[ModelDefinition]:
        """All registered definitions. Callers must not rely on the order."""
        return list(self._models.values())

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def load(self) -> int:
        """
        Load every definition file into memory.

        Corrupt or invalid files are skipped with a warning.

        Returns:
            Number of definitions loaded
        """
        self.models_dir.mkdir(parents=True, exist_ok=True)
        loaded: dict[str, ModelDefinition] = {}

        for path in sorted(self.models_dir.glob(f"*{DEFINITION_FILE_SUFFIX}")):
            if path.name.startswith("."):
                continue
            try:
                model = self._read_definition(path)
            except (OSError, ValueError, ModelDefinitionError) as e:
                logger.warning(f"Skipping unreadable model definition {path.name}: {e}")
                continue
            if model.name != path.stem:
                logger.warning(
                    f"Skipping model definition {path.name}: "
                    f"declares name '{model.name}', expected '{path.stem}'"
                )
                continue
            loaded[model.name] = model

        with self._write_lock:
            self._models = loaded

        logger.info(f"Loaded {len(loaded)} existing models from {self.models_dir}")
        return len(loaded)

    @staticmethod
    def _read_definition(path: Path) -> ModelDefinition:
        data = json.loads(path.read_text(encoding="utf-8"))
        ensure_valid_definition(data)
        model = ModelDefinition.from_dict(data)
        if not model.table_name:
            model = model.with_table_name(model.derive_table_name())
        return model

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def register(
        self,
        definition: ModelDefinition | Mapping[str, Any],
        overwrite: bool = True,
    ) -> ModelDefinition:
        """
        Validate, persist and publish a model definition.

        An existing entry under the same name is replaced, keeping its
        table name unless the new definition sets one explicitly.

        Args:
            definition: ModelDefinition or its raw JSON shape
            overwrite: If False, an existing name raises ConflictError

        Returns:
            The published definition (with ``table_name`` populated)

        Raises:
            ModelDefinitionError: If the definition is invalid
            ConflictError: If the name exists and ``overwrite`` is False
            StorageError: If the definition file cannot be written
        """
        start_time = time.time()
        raw = definition.to_dict() if isinstance(definition, ModelDefinition) else definition
        ensure_valid_definition(raw)
        model = ModelDefinition.from_dict(raw)

        with self._write_lock:
            existing = self._models.get(model.name)
            if existing is not None and not overwrite:
                raise ConflictError(f"Model {model.name} already exists", model_name=model.name)

            if not model.table_name:
                table_name = existing.table_name if existing else None
                model = model.with_table_name(table_name or model.derive_table_name())

            path = self._path_for(model.name)
            try:
                self._write_atomic(path, model.to_dict())
            except OSError as e:
                record_operation(
                    "catalog.register",
                    (time.time() - start_time) * 1000,
                    success=False,
                    model=model.name,
                )
                raise StorageError(
                    f"Failed to persist model {model.name}: {e}",
                    table=model.table_name,
                    operation="register",
                ) from e

            models = dict(self._models)
            models[model.name] = model
            self._models = models

        duration_ms = (time.time() - start_time) * 1000
        record_operation("catalog.register", duration_ms, success=True, model=model.name)
        log_operation(
            contextual_logger,
            "catalog.register",
            duration_ms=duration_ms,
            model_name=model.name,
            table_name=model.table_name,
            replaced=existing is not None,
        )
        return model

    def delete(self, name: str) -> bool:
        """
        Remove a definition from disk and memory.

        Deleting a name with no file is a no-op, as is a name that is not a
        valid model name.

        Returns:
            True if anything was removed

        Raises:
            StorageError: If the file exists but cannot be removed
        """
        if not re.fullmatch(MODEL_NAME_PATTERN, name):
            logger.warning(f"Refusing to delete invalid model name {name!r}")
            return False
        path = self._path_for(name)
        with self._write_lock:
            removed_file = True
            try:
                path.unlink()
            except FileNotFoundError:
                removed_file = False
                logger.warning(f"Model file not found for deletion: {name}")
            except OSError as e:
                raise StorageError(
                    f"Failed to delete model {name}: {e}", operation="delete"
                ) from e

            removed_entry = name in self._models
            if removed_entry:
                models = dict(self._models)
                del models[name]
                self._models = models

        if removed_file or removed_entry:
            logger.info(f"Model {name} deleted from catalog")
        return removed_file or removed_entry

    def _path_for(self, name: str) -> Path:
        return self.models_dir / f"{name}{DEFINITION_FILE_SUFFIX}"

    def _write_atomic(self, path: Path, data: dict[str, Any]) -> None:
        self.models_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.models_dir, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

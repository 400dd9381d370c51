"""
Record access engine.

Every record operation follows the same shape:

    resolve model -> authorize -> scope by owner -> validate -> storage

Ownership scoping: for any principal whose role is not the admin role, on
a model that declares an ``ownerField``, the effective storage filter is
the caller's filter with ``ownerField`` forced to the principal's id.
Admins, and models without an owner field, get the caller's filter as-is.
Permission checks apply to everyone, admins included.
"""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from ..constants import (
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_READ,
    ACTION_UPDATE,
    DEFAULT_ADMIN_ROLE,
    RECORD_ID_FIELD,
)
from ..exceptions import CrudEngineError, ForbiddenError, NotFoundError, ValidationError
from ..observability import operation_context, record_operation
from ..observability import get_logger as get_contextual_logger
from ..storage.base import DESCENDING, Record, StorageClient
from .catalog import SchemaCatalog
from .coercion import coerce_value, validate_payload
from .definitions import ModelDefinition
from .permissions import require

contextual_logger = get_contextual_logger(__name__)

NEWEST_FIRST = [(RECORD_ID_FIELD, DESCENDING)]


class RecordAccessEngine:
    """
    Permission-checked, ownership-scoped CRUD over runtime-declared models.

    Args:
        catalog: Source of model definitions
        storage: Table-addressed storage client
        admin_role: Role that bypasses ownership scoping

    Example:
        engine = RecordAccessEngine(catalog, InMemoryStorage())
        task = await engine.create("Task", {"title": "x"}, principal)
        tasks = await engine.list("Task", principal, {"done": "false"})
    """

    def __init__(
        self,
        catalog: SchemaCatalog,
        storage: StorageClient,
        admin_role: str = DEFAULT_ADMIN_ROLE,
    ) -> None:
        self.catalog = catalog
        self.storage = storage
        self.admin_role = admin_role

    # ------------------------------------------------------------------
    # Scoping helpers
    # ------------------------------------------------------------------

    def is_admin(self, principal: Any) -> bool:
        return principal.role == self.admin_role

    def is_scoped(self, model: ModelDefinition, principal: Any) -> bool:
        """True when ownership scoping applies to this principal and model."""
        return bool(model.owner_field) and not self.is_admin(principal)

    def owner_value(self, model: ModelDefinition, principal: Any) -> Any:
        """
        The principal id as stored in the model's owner field.

        Falls back to the raw id when it does not coerce, so it simply
        matches no record.
        """
        owner = model.owner
        if owner is None:
            return principal.id
        try:
            return coerce_value(owner, principal.id, model.name)
        except ValidationError:
            return principal.id

    def _coerce_filters(
        self, model: ModelDefinition, filters: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        coerced: dict[str, Any] = {}
        for key, value in (filters or {}).items():
            if key == RECORD_ID_FIELD:
                coerced[key] = value
                continue
            field = model.get_field(key)
            if field is None:
                raise ValidationError(
                    f"Cannot filter on unknown field {key}",
                    field_name=key,
                    model_name=model.name,
                )
            coerced[key] = coerce_value(field, value, model.name)
        return coerced

    def scoped_filter(
        self,
        model: ModelDefinition,
        principal: Any,
        filters: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Merge caller filters with the ownership constraint.

        Raises:
            ValidationError: If a filter names an undeclared field or its
                value does not coerce
        """
        where = self._coerce_filters(model, filters)
        if self.is_scoped(model, principal):
            where[model.owner_field] = self.owner_value(model, principal)
        return where

    async def _check_ownership(
        self, model: ModelDefinition, record_id: Any, principal: Any, action: str
    ) -> None:
        if not self.is_scoped(model, principal):
            return
        existing = await self.storage.find_one(
            model.table_name, self.scoped_filter(model, principal, {RECORD_ID_FIELD: record_id})
        )
        if existing is None:
            raise NotFoundError("Record not found", model_name=model.name, record_id=record_id)
        if existing.get(model.owner_field) != self.owner_value(model, principal):
            raise ForbiddenError(
                "Access denied: can only modify your own records",
                model_name=model.name,
                action=action,
                role=principal.role,
            )

    @contextmanager
    def _operation(self, action: str, model_name: str, principal: Any) -> Iterator[None]:
        start_time = time.time()
        success = False
        with operation_context(model_name, action, principal.id):
            try:
                yield
                success = True
            except CrudEngineError as e:
                contextual_logger.debug(f"{action} on {model_name} failed: {e}")
                raise
            finally:
                record_operation(
                    f"engine.{action}",
                    (time.time() - start_time) * 1000,
                    success=success,
                    model=model_name,
                )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create(
        self, model_name: str, payload: Mapping[str, Any] | None, principal: Any
    ) -> Record:
        """
        Create a record. The owner field, if declared, is always set to the
        caller's id.

        Raises:
            NotFoundError: Unknown model
            ForbiddenError: Role lacks ``create``
            ValidationError: Missing required field or bad value
        """
        with self._operation(ACTION_CREATE, model_name, principal):
            model = self.catalog.get(model_name)
            require(principal.role, model, ACTION_CREATE)

            data = dict(payload or {})
            if model.owner_field:
                data[model.owner_field] = principal.id

            validated = validate_payload(model, data, is_create=True)
            record = await self.storage.create(model.table_name, validated)
            contextual_logger.debug(
                f"Created {model.name} record {record.get(RECORD_ID_FIELD)}"
            )
            return record

    async def list(
        self,
        model_name: str,
        principal: Any,
        filters: Mapping[str, Any] | None = None,
    ) -> list[Record]:
        """
        List records visible to the caller, newest first.

        Raises:
            NotFoundError: Unknown model
            ForbiddenError: Role lacks ``read``
            ValidationError: Bad filter key or value
        """
        with self._operation(ACTION_READ, model_name, principal):
            model = self.catalog.get(model_name)
            require(principal.role, model, ACTION_READ)
            where = self.scoped_filter(model, principal, filters)
            return await self.storage.find_many(model.table_name, where, order_by=NEWEST_FIRST)

    async def get(self, model_name: str, record_id: Any, principal: Any) -> Record:
        """
        Fetch one record by id, within the caller's ownership scope.

        Raises:
            NotFoundError: Unknown model, or record absent / not visible
            ForbiddenError: Role lacks ``read``
        """
        with self._operation(ACTION_READ, model_name, principal):
            model = self.catalog.get(model_name)
            require(principal.role, model, ACTION_READ)
            where = self.scoped_filter(model, principal, {RECORD_ID_FIELD: record_id})
            record = await self.storage.find_one(model.table_name, where)
            if record is None:
                raise NotFoundError(
                    "Record not found", model_name=model.name, record_id=record_id
                )
            return record

    async def update(
        self,
        model_name: str,
        record_id: Any,
        payload: Mapping[str, Any] | None,
        principal: Any,
    ) -> Record:
        """
        Partially update a record.

        Non-admin callers on owned models must own the record.

        Note:
            Non-admin callers cannot reassign ownership. An owner field in
            their payload is ignored without error and the stored owner is
            kept. Admins may change it.

        Raises:
            NotFoundError: Unknown model, or record absent / not visible
            ForbiddenError: Role lacks ``update`` or caller is not the owner
            ValidationError: Bad value
        """
        with self._operation(ACTION_UPDATE, model_name, principal):
            model = self.catalog.get(model_name)
            require(principal.role, model, ACTION_UPDATE)
            await self._check_ownership(model, record_id, principal, ACTION_UPDATE)

            validated = validate_payload(model, payload, is_create=False)
            if self.is_scoped(model, principal):
                validated.pop(model.owner_field, None)

            where = self.scoped_filter(model, principal, {RECORD_ID_FIELD: record_id})
            record = await self.storage.update(model.table_name, where, validated)
            if record is None:
                raise NotFoundError(
                    "Record not found", model_name=model.name, record_id=record_id
                )
            return record

    async def delete(self, model_name: str, record_id: Any, principal: Any) -> None:
        """
        Delete a record.

        Raises:
            NotFoundError: Unknown model, or record absent / not visible
            ForbiddenError: Role lacks ``delete`` or caller is not the owner
        """
        with self._operation(ACTION_DELETE, model_name, principal):
            model = self.catalog.get(model_name)
            require(principal.role, model, ACTION_DELETE)
            await self._check_ownership(model, record_id, principal, ACTION_DELETE)

            where = self.scoped_filter(model, principal, {RECORD_ID_FIELD: record_id})
            deleted = await self.storage.delete(model.table_name, where)
            if not deleted:
                raise NotFoundError(
                    "Record not found", model_name=model.name, record_id=record_id
                )

"""
Unit tests for RecordAccessEngine.

Tests permission checks, ownership scoping, validation and filter
handling against InMemoryStorage.
"""

import pytest

from crud_engine.auth import Principal
from crud_engine.core import RecordAccessEngine
from crud_engine.exceptions import (ForbiddenError, NotFoundError,
                                    ValidationError)
from crud_engine.observability import get_metrics_collector


class TestCreate:
    """Test record creation."""

    @pytest.mark.asyncio
    async def test_create_applies_defaults_and_owner(self, engine, admin):
        record = await engine.create("Task", {"title": "x"}, admin)
        assert record == {"id": 1, "title": "x", "done": False, "ownerId": "admin-1"}

    @pytest.mark.asyncio
    async def test_create_overwrites_client_owner(self, engine, member):
        record = await engine.create("Task", {"title": "x", "ownerId": "someone"}, member)
        assert record["ownerId"] == "member-1"

    @pytest.mark.asyncio
    async def test_create_without_permission(self, engine, viewer, storage):
        with pytest.raises(ForbiddenError, match="create permission required"):
            await engine.create("Task", {"title": "x"}, viewer)
        assert await storage.find_many("tasks") == []

    @pytest.mark.asyncio
    async def test_create_unknown_model(self, engine, admin):
        with pytest.raises(NotFoundError, match="Model Ghost not found"):
            await engine.create("Ghost", {}, admin)

    @pytest.mark.asyncio
    async def test_create_role_without_entry(self, engine):
        stranger = Principal(id="s-1", role="Stranger")
        with pytest.raises(ForbiddenError, match="no permissions for this role"):
            await engine.create("Task", {"title": "x"}, stranger)

    @pytest.mark.asyncio
    async def test_create_missing_required(self, engine, admin):
        with pytest.raises(ValidationError) as exc_info:
            await engine.create("Task", {"done": True}, admin)
        assert exc_info.value.field_name == "title"

    @pytest.mark.asyncio
    async def test_create_drops_undeclared_keys(self, engine, admin):
        record = await engine.create("Note", {"body": "b", "secret": 1}, admin)
        assert "secret" not in record

    @pytest.mark.asyncio
    async def test_create_owner_coerced_by_field_type(self, catalog, storage):
        catalog.register(
            {
                "name": "Post",
                "fields": [{"name": "authorId", "type": "number"}],
                "ownerField": "authorId",
                "rbac": {"Writer": ["all"]},
            }
        )
        engine = RecordAccessEngine(catalog, storage)
        writer = Principal(id=7, role="Writer")

        record = await engine.create("Post", {}, writer)

        assert record["authorId"] == 7
        assert await engine.list("Post", writer) == [record]


class TestOwnershipScoping:
    """Non-admin callers only see and touch their own records."""

    @pytest.mark.asyncio
    async def test_list_only_own_records(self, engine, member, other_member):
        await engine.create("Task", {"title": "mine"}, member)
        await engine.create("Task", {"title": "theirs"}, other_member)

        records = await engine.list("Task", member)

        assert [r["title"] for r in records] == ["mine"]

    @pytest.mark.asyncio
    async def test_conflicting_owner_filter_is_overridden(self, engine, member, other_member):
        await engine.create("Task", {"title": "mine"}, member)
        await engine.create("Task", {"title": "theirs"}, other_member)

        records = await engine.list("Task", member, {"ownerId": "member-2"})

        assert [r["ownerId"] for r in records] == ["member-1"]

    @pytest.mark.asyncio
    async def test_get_foreign_record_is_not_found(self, engine, member, other_member):
        theirs = await engine.create("Task", {"title": "theirs"}, other_member)
        with pytest.raises(NotFoundError):
            await engine.get("Task", theirs["id"], member)

    @pytest.mark.asyncio
    async def test_update_foreign_record_is_not_found(
        self, engine, storage, member, other_member
    ):
        theirs = await engine.create("Task", {"title": "theirs"}, other_member)
        with pytest.raises(NotFoundError):
            await engine.update("Task", theirs["id"], {"title": "hijacked"}, member)
        stored = await storage.find_one("tasks", {"id": theirs["id"]})
        assert stored["title"] == "theirs"

    @pytest.mark.asyncio
    async def test_delete_foreign_record_is_not_found(
        self, engine, storage, member, other_member
    ):
        theirs = await engine.create("Task", {"title": "theirs"}, other_member)
        with pytest.raises(NotFoundError):
            await engine.delete("Task", theirs["id"], member)
        assert await storage.find_one("tasks", {"id": theirs["id"]}) is not None

    @pytest.mark.asyncio
    async def test_update_cannot_reassign_owner(self, engine, member):
        mine = await engine.create("Task", {"title": "mine"}, member)
        updated = await engine.update(
            "Task", mine["id"], {"title": "renamed", "ownerId": "member-2"}, member
        )
        assert updated["title"] == "renamed"
        assert updated["ownerId"] == "member-1"

    @pytest.mark.asyncio
    async def test_admin_bypasses_scoping(self, engine, admin, member, other_member):
        await engine.create("Task", {"title": "mine"}, member)
        await engine.create("Task", {"title": "theirs"}, other_member)

        records = await engine.list("Task", admin)

        assert [r["title"] for r in records] == ["theirs", "mine"]

    @pytest.mark.asyncio
    async def test_admin_can_reassign_owner(self, engine, admin, member):
        mine = await engine.create("Task", {"title": "mine"}, member)
        updated = await engine.update("Task", mine["id"], {"ownerId": "member-2"}, admin)
        assert updated["ownerId"] == "member-2"

    @pytest.mark.asyncio
    async def test_ownership_race_is_forbidden(self, engine, storage, member):
        mine = await engine.create("Task", {"title": "mine"}, member)
        original_find_one = storage.find_one

        async def find_one_after_reassignment(table, filter):
            record = await original_find_one(table, filter)
            if record is not None:
                record["ownerId"] = "member-2"
            return record

        storage.find_one = find_one_after_reassignment
        with pytest.raises(ForbiddenError, match="can only modify your own records"):
            await engine.delete("Task", mine["id"], member)

    @pytest.mark.asyncio
    async def test_ownership_race_on_update_is_forbidden(self, engine, storage, member):
        mine = await engine.create("Task", {"title": "mine"}, member)
        original_find_one = storage.find_one

        async def find_one_after_reassignment(table, filter):
            record = await original_find_one(table, filter)
            if record is not None:
                record["ownerId"] = "member-2"
            return record

        storage.find_one = find_one_after_reassignment
        with pytest.raises(ForbiddenError, match="can only modify your own records"):
            await engine.update("Task", mine["id"], {"title": "renamed"}, member)
        assert (await original_find_one("tasks", {"id": mine["id"]}))["title"] == "mine"

    @pytest.mark.asyncio
    async def test_get_non_ascii_digit_id_is_not_found(self, engine, admin):
        await engine.create("Task", {"title": "x"}, admin)
        with pytest.raises(NotFoundError):
            await engine.get("Task", "\u00b2", admin)


class TestReadUpdateDelete:
    @pytest.mark.asyncio
    async def test_list_newest_first(self, engine, admin):
        for title in ("a", "b", "c"):
            await engine.create("Task", {"title": title}, admin)
        records = await engine.list("Task", admin)
        assert [r["title"] for r in records] == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_list_filter_values_coerced(self, engine, admin):
        await engine.create("Task", {"title": "a", "done": True}, admin)
        await engine.create("Task", {"title": "b"}, admin)

        records = await engine.list("Task", admin, {"done": "false"})

        assert [r["title"] for r in records] == ["b"]

    @pytest.mark.asyncio
    async def test_list_unknown_filter_rejected(self, engine, admin):
        with pytest.raises(ValidationError, match="Cannot filter on unknown field color"):
            await engine.list("Task", admin, {"color": "red"})

    @pytest.mark.asyncio
    async def test_get_by_string_id(self, engine, admin):
        created = await engine.create("Task", {"title": "x"}, admin)
        assert await engine.get("Task", str(created["id"]), admin) == created

    @pytest.mark.asyncio
    async def test_get_missing(self, engine, admin):
        with pytest.raises(NotFoundError, match="Record not found"):
            await engine.get("Task", 404, admin)

    @pytest.mark.asyncio
    async def test_read_only_role_cannot_update(self, engine, admin, viewer):
        created = await engine.create("Note", {"body": "b"}, admin)
        with pytest.raises(ForbiddenError, match="update permission required"):
            await engine.update("Note", created["id"], {"body": "c"}, viewer)

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, engine, admin):
        created = await engine.create("Note", {"body": "b", "pinned": "true"}, admin)
        updated = await engine.update("Note", created["id"], {"priority": "2"}, admin)
        assert updated == {"id": created["id"], "body": "b", "pinned": True, "priority": 2}

    @pytest.mark.asyncio
    async def test_update_missing_record(self, engine, admin):
        with pytest.raises(NotFoundError):
            await engine.update("Note", 99, {"body": "c"}, admin)

    @pytest.mark.asyncio
    async def test_update_invalid_value(self, engine, admin):
        created = await engine.create("Note", {"body": "b"}, admin)
        with pytest.raises(ValidationError):
            await engine.update("Note", created["id"], {"due": "someday"}, admin)

    @pytest.mark.asyncio
    async def test_delete_then_get(self, engine, admin):
        created = await engine.create("Note", {"body": "b"}, admin)
        await engine.delete("Note", created["id"], admin)
        with pytest.raises(NotFoundError):
            await engine.get("Note", created["id"], admin)

    @pytest.mark.asyncio
    async def test_delete_missing_record(self, engine, admin):
        with pytest.raises(NotFoundError):
            await engine.delete("Note", 99, admin)

    @pytest.mark.asyncio
    async def test_editor_without_delete(self, engine):
        editor = Principal(id="e-1", role="Editor")
        created = await engine.create("Note", {"body": "b"}, editor)
        with pytest.raises(ForbiddenError, match="delete permission required"):
            await engine.delete("Note", created["id"], editor)

    @pytest.mark.asyncio
    async def test_custom_admin_role(self, catalog, storage, member, other_member):
        engine = RecordAccessEngine(catalog, storage, admin_role="Member")
        catalog.register(
            {
                "name": "Task",
                "fields": [
                    {"name": "title", "type": "string"},
                    {"name": "ownerId", "type": "string"},
                ],
                "ownerField": "ownerId",
                "rbac": {"Member": ["all"]},
            }
        )
        await engine.create("Task", {"title": "theirs"}, other_member)
        assert len(await engine.list("Task", member)) == 1


class TestEngineMetrics:
    @pytest.mark.asyncio
    async def test_operations_are_recorded(self, engine, admin, viewer):
        await engine.create("Task", {"title": "x"}, admin)
        with pytest.raises(ForbiddenError):
            await engine.create("Task", {"title": "y"}, viewer)

        metrics = get_metrics_collector().get("engine.create", "Task")

        assert metrics.count == 2
        assert metrics.errors == 1

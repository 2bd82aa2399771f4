"""Integration tests for the assignment graph store."""

import asyncio
import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from contentops.database import unit_of_work
from contentops.kernel.assignments.assignment_store import AssignmentStore
from contentops.kernel.errors import Internal, InvalidRole, NotFound
from contentops.kernel.models import Assignment, Post, PostStatus, UserRole

from factories import make_user


async def _admin_ids(store: AssignmentStore, founder_id):
    return {row["admin_id"] for row in await store.list_admins_for_founder(founder_id)}


class TestReplaceAssignments:

    @pytest.mark.asyncio
    async def test_replace_sets_exact_admin_set(self, db_session, super_admin, admin, other_admin, founder):
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder.id, [admin.id], super_admin.id)
        await db_session.commit()

        await store.replace_assignments(founder.id, [other_admin.id], super_admin.id)
        await db_session.commit()

        assert await _admin_ids(store, founder.id) == {other_admin.id}
        assert not await store.is_assigned(admin.id, founder.id)

    @pytest.mark.asyncio
    async def test_replace_is_idempotent(self, db_session, super_admin, admin, other_admin, founder):
        store = AssignmentStore(db_session)
        for _ in range(2):
            await store.replace_assignments(founder.id, [admin.id, other_admin.id], super_admin.id)
            await db_session.commit()

        result = await db_session.execute(select(Assignment).where(Assignment.founder_id == founder.id))
        assert len(result.scalars().all()) == 2

    @pytest.mark.asyncio
    async def test_duplicate_admin_ids_collapse(self, db_session, super_admin, admin, founder):
        edges = await AssignmentStore(db_session).replace_assignments(
            founder.id, [admin.id, admin.id, admin.id], super_admin.id
        )
        await db_session.commit()
        assert len(edges) == 1

    @pytest.mark.asyncio
    async def test_empty_set_unassigns_everyone(self, db_session, super_admin, admin, founder):
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder.id, [admin.id], super_admin.id)
        await db_session.commit()

        await store.replace_assignments(founder.id, [], super_admin.id)
        await db_session.commit()
        assert await _admin_ids(store, founder.id) == set()

    @pytest.mark.asyncio
    async def test_unknown_admin_leaves_set_unchanged(self, db_session, super_admin, admin, other_admin, founder):
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder.id, [admin.id], super_admin.id)
        await db_session.commit()

        missing = uuid.uuid4()
        with pytest.raises(NotFound) as exc_info:
            await store.replace_assignments(founder.id, [other_admin.id, missing], super_admin.id)
        assert str(missing) in exc_info.value.message

        assert await _admin_ids(store, founder.id) == {admin.id}

    @pytest.mark.asyncio
    async def test_non_admin_in_set_is_invalid_role(self, db_session, super_admin, admin, founder, other_founder):
        store = AssignmentStore(db_session)
        with pytest.raises(InvalidRole):
            await store.replace_assignments(founder.id, [admin.id, other_founder.id], super_admin.id)

    @pytest.mark.asyncio
    async def test_founder_must_exist_and_be_founder(self, db_session, super_admin, admin):
        store = AssignmentStore(db_session)
        with pytest.raises(NotFound):
            await store.replace_assignments(uuid.uuid4(), [admin.id], super_admin.id)
        with pytest.raises(InvalidRole):
            await store.replace_assignments(admin.id, [], super_admin.id)

    @pytest.mark.asyncio
    async def test_store_failure_keeps_previous_set(
        self, db_session, super_admin, admin, other_admin, founder, monkeypatch
    ):
        # The failed call rolls the session back, which expires the fixtures
        founder_id, admin_id, other_id, by = founder.id, admin.id, other_admin.id, super_admin.id
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder_id, [admin_id], by)
        await db_session.commit()

        async def broken_flush(self, *args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(AsyncSession, "flush", broken_flush)
        with pytest.raises(Internal):
            await store.replace_assignments(founder_id, [other_id], by)
        monkeypatch.undo()

        assert await _admin_ids(store, founder_id) == {admin_id}


class TestConcurrentReplacement:

    @pytest.mark.asyncio
    async def test_concurrent_replacements_both_commit(
        self, session_factory, super_admin, admin, other_admin, founder
    ):
        founder_id, by = founder.id, super_admin.id
        candidates = ({admin.id}, {other_admin.id})

        async def replace(admin_ids):
            async with unit_of_work(session_factory) as session:
                await AssignmentStore(session).replace_assignments(founder_id, admin_ids, by)

        await asyncio.gather(*(replace(ids) for ids in candidates))

        async with unit_of_work(session_factory) as session:
            final = await _admin_ids(AssignmentStore(session), founder_id)
        assert final in candidates

    @pytest.mark.asyncio
    async def test_write_locked_unit_of_work_serializes_read_then_write(
        self, session_factory, super_admin, admin, other_admin, founder
    ):
        founder_id, by = founder.id, super_admin.id

        async def replace_after_read(admin_id):
            async with unit_of_work(session_factory, write_lock=True) as session:
                store = AssignmentStore(session)
                await store.list_admins_for_founder(founder_id)
                await store.replace_assignments(founder_id, [admin_id], by)

        await asyncio.gather(replace_after_read(admin.id), replace_after_read(other_admin.id))

        async with unit_of_work(session_factory) as session:
            edges = await AssignmentStore(session).list_admins_for_founder(founder_id)
        assert len(edges) == 1


class TestGraphReads:

    @pytest.mark.asyncio
    async def test_list_founders_for_admin_with_counts(self, db_session, super_admin, admin, founder, other_founder):
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder.id, [admin.id], super_admin.id)
        await store.replace_assignments(other_founder.id, [admin.id], super_admin.id)
        db_session.add_all([
            Post(founder_id=founder.id, admin_id=admin.id, caption="a", images=[], status=PostStatus.SCHEDULED.value),
            Post(founder_id=founder.id, admin_id=admin.id, caption="b", images=[], status=PostStatus.APPROVED.value),
            Post(founder_id=founder.id, admin_id=admin.id, caption="c", images=[], status=PostStatus.PENDING.value),
        ])
        await db_session.commit()

        founders = await store.list_founders_for_admin(admin.id, include_counts=True)
        by_id = {f["founder_id"]: f for f in founders}

        assert by_id[founder.id]["post_counts"] == {"total": 3, "scheduled": 1, "approved": 1}
        assert by_id[other_founder.id]["post_counts"] == {"total": 0, "scheduled": 0, "approved": 0}
        assert by_id[founder.id]["profile"] == {"company_name": "Acme", "industry": "SaaS"}

    @pytest.mark.asyncio
    async def test_list_founders_without_counts(self, db_session, super_admin, admin, founder):
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder.id, [admin.id], super_admin.id)
        await db_session.commit()

        (entry,) = await store.list_founders_for_admin(admin.id)
        assert entry["founder_id"] == founder.id
        assert "post_counts" not in entry

    @pytest.mark.asyncio
    async def test_list_founders_for_non_admin(self, db_session, founder):
        store = AssignmentStore(db_session)
        with pytest.raises(InvalidRole):
            await store.list_founders_for_admin(founder.id)
        with pytest.raises(NotFound):
            await store.list_founders_for_admin(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_founder_ids_for_admin(self, db_session, super_admin, admin, founder, other_founder):
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder.id, [admin.id], super_admin.id)
        await db_session.commit()

        assert await store.founder_ids_for_admin(admin.id) == {founder.id}
        assert await store.founder_ids_for_admin(uuid.uuid4()) == set()


class TestDeleteAssignment:

    @pytest.mark.asyncio
    async def test_delete_one_edge(self, db_session, super_admin, admin, other_admin, founder):
        store = AssignmentStore(db_session)
        await store.replace_assignments(founder.id, [admin.id, other_admin.id], super_admin.id)
        await db_session.commit()

        await store.delete_assignment(admin.id, founder.id)
        await db_session.commit()
        assert await _admin_ids(store, founder.id) == {other_admin.id}

    @pytest.mark.asyncio
    async def test_delete_missing_edge(self, db_session, admin, founder):
        store = AssignmentStore(db_session)
        with pytest.raises(NotFound) as exc_info:
            await store.delete_assignment(admin.id, founder.id)
        assert exc_info.value.message == "Assignment not found"

    @pytest.mark.asyncio
    async def test_delete_unknown_users(self, db_session, admin, founder):
        store = AssignmentStore(db_session)
        with pytest.raises(NotFound):
            await store.delete_assignment(uuid.uuid4(), founder.id)
        with pytest.raises(NotFound):
            await store.delete_assignment(admin.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_admins_unknown_founder(self, db_session):
        with pytest.raises(NotFound):
            await AssignmentStore(db_session).list_admins_for_founder(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_role_mismatch_when_listing_admins(self, db_session):
        other = await make_user(db_session, UserRole.ADMIN, "Carl Admin")
        with pytest.raises(InvalidRole):
            await AssignmentStore(db_session).list_admins_for_founder(other.id)

"""Integration tests for the post workflow."""

import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy import select

from contentops.kernel.assignments.assignment_store import AssignmentStore
from contentops.kernel.errors import Conflict, Forbidden, InvalidFormat, NotFound
from contentops.kernel.models import ActivityAction, ActivityLog, PostStatus
from contentops.kernel.posts import PostService

from factories import assign

SCHEDULED = datetime(2026, 11, 1, 9, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def assigned(db_session, super_admin, admin, founder):
    await assign(db_session, admin, founder, super_admin)


async def _actions(session):
    result = await session.execute(select(ActivityLog.action))
    return sorted(result.scalars().all())


class TestCreate:

    @pytest.mark.asyncio
    async def test_create_pending_without_date(self, db_session, admin, founder, assigned):
        post = await PostService(db_session).create_post(admin, founder.id, "Launch day")
        await db_session.commit()

        assert post.status == PostStatus.PENDING.value
        assert post.admin_id == admin.id
        assert await _actions(db_session) == [ActivityAction.POST_CREATED.value]

    @pytest.mark.asyncio
    async def test_create_scheduled_with_date(self, db_session, admin, founder, assigned):
        post = await PostService(db_session).create_post(admin, founder.id, "Teaser", scheduled_date=SCHEDULED)
        assert post.status == PostStatus.SCHEDULED.value

    @pytest.mark.asyncio
    async def test_unassigned_admin_cannot_create(self, db_session, other_admin, founder, assigned):
        with pytest.raises(Forbidden):
            await PostService(db_session).create_post(other_admin, founder.id, "Nope")

    @pytest.mark.asyncio
    async def test_founder_cannot_create(self, db_session, founder):
        with pytest.raises(Forbidden):
            await PostService(db_session).create_post(founder, founder.id, "Self post")

    @pytest.mark.asyncio
    async def test_unknown_founder(self, db_session, admin):
        with pytest.raises(NotFound):
            await PostService(db_session).create_post(admin, uuid.uuid4(), "Ghost")

    @pytest.mark.asyncio
    async def test_too_many_images(self, db_session, admin, founder, assigned):
        images = [f"http://cdn/{i}.png" for i in range(11)]
        with pytest.raises(InvalidFormat):
            await PostService(db_session).create_post(admin, founder.id, "Gallery", images=images)


class TestReview:

    @pytest.mark.asyncio
    async def test_founder_approves_then_posts(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")

        post = await service.set_status(founder, post.id, "approved")
        assert post.status == PostStatus.APPROVED.value
        post = await service.set_status(founder, post.id, "posted")
        assert post.status == PostStatus.POSTED.value
        await db_session.commit()

        assert await _actions(db_session) == sorted([
            ActivityAction.POST_CREATED.value,
            ActivityAction.POST_APPROVED.value,
            ActivityAction.POST_POSTED.value,
        ])

    @pytest.mark.asyncio
    async def test_reject_requires_feedback(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")

        with pytest.raises(InvalidFormat):
            await service.set_status(founder, post.id, "rejected")
        with pytest.raises(InvalidFormat):
            await service.set_status(founder, post.id, "rejected", "   ")

        post = await service.set_status(founder, post.id, "rejected", "Tone is off")
        assert post.status == PostStatus.REJECTED.value
        assert post.feedback == "Tone is off"

    @pytest.mark.asyncio
    async def test_posted_is_terminal(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft", scheduled_date=SCHEDULED)
        await service.set_status(founder, post.id, "posted")

        with pytest.raises(Conflict):
            await service.set_status(founder, post.id, "approved")

    @pytest.mark.asyncio
    async def test_review_status_set_is_closed(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")
        for status in ("pending", "scheduled", "published"):
            with pytest.raises(InvalidFormat):
                await service.set_status(founder, post.id, status)

    @pytest.mark.asyncio
    async def test_admin_cannot_review(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")
        with pytest.raises(Forbidden):
            await service.set_status(admin, post.id, "approved")

    @pytest.mark.asyncio
    async def test_other_founder_cannot_review(self, db_session, admin, founder, other_founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")
        with pytest.raises(Forbidden):
            await service.set_status(other_founder, post.id, "approved")
        with pytest.raises(Forbidden):
            await service.add_feedback(other_founder, post.id, "hi")

    @pytest.mark.asyncio
    async def test_add_feedback_keeps_status(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")

        post = await service.add_feedback(founder, post.id, "Add a link")
        assert post.feedback == "Add a link"
        assert post.status == PostStatus.PENDING.value
        with pytest.raises(InvalidFormat):
            await service.add_feedback(founder, post.id, "")


class TestEdit:

    @pytest.mark.asyncio
    async def test_scheduled_date_forces_scheduled(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")

        post = await service.update_post(admin, post.id, {"scheduled_date": SCHEDULED, "caption": "Final"})
        assert post.status == PostStatus.SCHEDULED.value
        assert post.caption == "Final"

    @pytest.mark.asyncio
    async def test_admin_cannot_approve_via_edit(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")
        with pytest.raises(Forbidden):
            await service.update_post(admin, post.id, {"status": "approved"})

    @pytest.mark.asyncio
    async def test_only_author_admin_edits(self, db_session, super_admin, admin, other_admin, founder, assigned):
        await assign(db_session, other_admin, founder, super_admin)
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")

        with pytest.raises(Forbidden):
            await service.update_post(other_admin, post.id, {"caption": "Hijack"})
        with pytest.raises(Forbidden):
            await service.delete_post(other_admin, post.id)
        with pytest.raises(Forbidden):
            await service.update_post(founder, post.id, {"caption": "Mine"})

    @pytest.mark.asyncio
    async def test_delete_post(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")
        post_id = post.id

        await service.delete_post(admin, post_id)
        await db_session.commit()
        with pytest.raises(NotFound):
            await service.get_post(admin, post_id)

    @pytest.mark.asyncio
    async def test_update_images_limit(self, db_session, admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Draft")

        post = await service.update_images(founder, post.id, ["http://cdn/a.png"])
        assert post.images == ["http://cdn/a.png"]
        with pytest.raises(InvalidFormat):
            await service.update_images(admin, post.id, ["x"] * 11)


class TestUnassignedAuthor:

    @pytest_asyncio.fixture
    async def reassigned_post(self, db_session, super_admin, admin, other_admin, founder, assigned):
        service = PostService(db_session)
        post = await service.create_post(admin, founder.id, "Before the handover")
        await AssignmentStore(db_session).replace_assignments(founder.id, [other_admin.id], super_admin.id)
        await db_session.commit()
        return post

    @pytest.mark.asyncio
    async def test_former_author_loses_read_and_edit(self, db_session, admin, reassigned_post):
        service = PostService(db_session)
        with pytest.raises(Forbidden):
            await service.get_post(admin, reassigned_post.id)
        with pytest.raises(Forbidden):
            await service.update_post(admin, reassigned_post.id, {"caption": "Still mine?"})
        with pytest.raises(Forbidden):
            await service.update_images(admin, reassigned_post.id, ["http://cdn/late.png"])
        with pytest.raises(Forbidden):
            await service.delete_post(admin, reassigned_post.id)

    @pytest.mark.asyncio
    async def test_former_author_no_longer_lists_post(self, db_session, admin, founder, reassigned_post):
        posts, total = await PostService(db_session).list_posts(admin)
        assert (posts, total) == ([], 0)
        with pytest.raises(Forbidden):
            await PostService(db_session).list_posts(admin, founder_id=founder.id)

    @pytest.mark.asyncio
    async def test_new_admin_reads_but_cannot_edit(self, db_session, other_admin, super_admin, reassigned_post):
        service = PostService(db_session)
        post = await service.get_post(other_admin, reassigned_post.id)
        assert post.caption == "Before the handover"
        with pytest.raises(Forbidden):
            await service.update_post(other_admin, post.id, {"caption": "Rewrite"})

        post = await service.update_post(super_admin, post.id, {"caption": "Edited by ops"})
        assert post.caption == "Edited by ops"


class TestListing:

    @pytest.mark.asyncio
    async def test_scope_per_role(self, db_session, super_admin, admin, other_admin, founder, other_founder, assigned):
        await assign(db_session, other_admin, other_founder, super_admin)
        service = PostService(db_session)
        await service.create_post(admin, founder.id, "A1")
        await service.create_post(admin, founder.id, "A2", scheduled_date=SCHEDULED)
        await service.create_post(other_admin, other_founder.id, "B1")
        await db_session.commit()

        posts, total = await service.list_posts(admin)
        assert total == 2
        assert posts[0].caption == "A2"

        _, total = await service.list_posts(founder)
        assert total == 2
        _, total = await service.list_posts(super_admin)
        assert total == 3
        _, total = await service.list_posts(super_admin, status=PostStatus.PENDING)
        assert total == 2

    @pytest.mark.asyncio
    async def test_cross_scope_filters_forbidden(self, db_session, admin, other_admin, founder, other_founder, assigned):
        service = PostService(db_session)
        with pytest.raises(Forbidden):
            await service.list_posts(admin, founder_id=other_founder.id)
        with pytest.raises(Forbidden):
            await service.list_posts(admin, admin_id=other_admin.id)
        with pytest.raises(Forbidden):
            await service.list_posts(founder, founder_id=other_founder.id)

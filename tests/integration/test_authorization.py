"""Integration tests for relationship-scoped authorization."""

import pytest

from contentops.kernel.errors import Forbidden
from contentops.kernel.models import Post, PostStatus
from contentops.kernel.permissions.permission_service import (
    AuthorizationService,
    Resource,
    ResourceClass,
)

from factories import assign


class TestFounderContent:

    @pytest.mark.asyncio
    async def test_assigned_admin_allowed(self, db_session, super_admin, admin, founder):
        await assign(db_session, admin, founder, super_admin)
        authz = AuthorizationService(db_session)
        assert await authz.can(admin, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder.id))

    @pytest.mark.asyncio
    async def test_unassigned_admin_denied(self, db_session, super_admin, admin, founder, other_founder):
        await assign(db_session, admin, founder, super_admin)
        authz = AuthorizationService(db_session)

        with pytest.raises(Forbidden) as exc_info:
            await authz.authorize(admin, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=other_founder.id))
        assert exc_info.value.message == "You are not assigned to this founder"

    @pytest.mark.asyncio
    async def test_unassignment_takes_effect_immediately(self, db_session, super_admin, admin, founder):
        edge = await assign(db_session, admin, founder, super_admin)
        authz = AuthorizationService(db_session)
        resource = Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder.id)
        assert await authz.can(admin, resource)

        await db_session.delete(edge)
        await db_session.commit()
        assert not await authz.can(admin, resource)

    @pytest.mark.asyncio
    async def test_super_admin_sees_any_founder(self, db_session, super_admin, founder):
        authz = AuthorizationService(db_session)
        assert await authz.can(super_admin, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder.id))

    @pytest.mark.asyncio
    async def test_founder_sees_only_self(self, db_session, founder, other_founder):
        authz = AuthorizationService(db_session)
        assert await authz.can(founder, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=founder.id))
        assert not await authz.can(founder, Resource(ResourceClass.FOUNDER_CONTENT, founder_id=other_founder.id))


class TestPostResources:

    @pytest.mark.asyncio
    async def test_post_authoring_requires_assignment(self, db_session, super_admin, admin, other_admin, founder):
        await assign(db_session, admin, founder, super_admin)
        authz = AuthorizationService(db_session)
        resource = Resource(ResourceClass.POST_AUTHORING, founder_id=founder.id)

        assert await authz.can(admin, resource)
        assert not await authz.can(other_admin, resource)
        assert not await authz.can(founder, resource)

    @pytest.mark.asyncio
    async def test_post_review_by_owning_founder(self, db_session, admin, founder, other_founder):
        post = Post(founder_id=founder.id, admin_id=admin.id, caption="x", images=[], status=PostStatus.PENDING.value)
        authz = AuthorizationService(db_session)
        resource = Resource(ResourceClass.POST_REVIEW, post=post)

        assert await authz.can(founder, resource)
        assert not await authz.can(other_founder, resource)
        assert not await authz.can(admin, resource)


class TestVisibleFounders:

    @pytest.mark.asyncio
    async def test_scope_per_role(self, db_session, super_admin, admin, other_admin, founder, other_founder):
        await assign(db_session, admin, founder, super_admin)
        authz = AuthorizationService(db_session)

        assert await authz.visible_founder_ids(super_admin) is None
        assert await authz.visible_founder_ids(admin) == {founder.id}
        assert await authz.visible_founder_ids(other_admin) == set()
        assert await authz.visible_founder_ids(other_founder) == {other_founder.id}

"""Tests for the member/admin gates, directly and through the API."""
import pytest

from conftest import auth_headers
from shelterhub.core.errors import Forbidden
from shelterhub.features.permissions.context import AccessContext
from shelterhub.features.permissions.dependencies import access_context
from shelterhub.features.permissions.guards import admin_access, member_access, require_admin, require_member
from shelterhub.features.shelters.models import MembershipRole, Shelter


def context_for(role):
    return AccessContext(actor_id="u1", shelter=Shelter(id="org1", name="Org 1", handle="org1"), role=role, source="path")


class TestPredicates:

    def test_admin_passes_both_gates(self):
        ctx = context_for(MembershipRole.ADMIN)
        assert require_member(ctx) is ctx
        assert require_admin(ctx) is ctx

    def test_member_passes_member_gate_only(self):
        ctx = context_for(MembershipRole.MEMBER)
        assert require_member(ctx) is ctx
        with pytest.raises(Forbidden):
            require_admin(ctx)

    def test_outsider_fails_both_gates(self):
        ctx = context_for(None)
        with pytest.raises(Forbidden):
            require_member(ctx)
        with pytest.raises(Forbidden):
            require_admin(ctx)

    async def test_predicates_do_not_touch_the_store(self, statements):
        require_member(context_for(MembershipRole.MEMBER))
        require_admin(context_for(MembershipRole.ADMIN))
        assert statements == []

    def test_factories_return_one_dependency_per_subject(self):
        assert member_access("tasks") is member_access("tasks")
        assert admin_access() is admin_access(None)
        assert member_access() is member_access(subject=None)
        assert access_context() is access_context(None) is access_context(subject=None)
        assert member_access("tasks") is not admin_access("tasks")


class TestGatesOverHttp:

    async def test_missing_token(self, client, shelter_graph):
        response = await client.get("/tasks/t1")

        assert response.status_code == 401
        assert response.json()["kind"] == "MissingActor"

    async def test_token_without_user_claim(self, client, shelter_graph):
        import jwt

        token = jwt.encode({"role": "x"}, "test-secret", algorithm="HS256")
        response = await client.get("/tasks/t1", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json()["kind"] == "MissingActor"

    async def test_sub_claim_is_accepted(self, client, shelter_graph):
        from conftest import make_token

        response = await client.get("/tasks/t1", headers={"Authorization": f"Bearer {make_token('u2', claim='sub')}"})

        assert response.status_code == 200

    async def test_outsider_is_forbidden(self, client, shelter_graph):
        response = await client.get("/tasks/t1", headers=auth_headers("u4"))

        assert response.status_code == 403
        assert response.json()["kind"] == "Forbidden"

    async def test_member_cannot_edit(self, client, shelter_graph):
        response = await client.patch("/tasks/t1", json={"title": "Walk"}, headers=auth_headers("u2"))

        assert response.status_code == 403

    async def test_unknown_task(self, client, shelter_graph):
        response = await client.get("/tasks/nope", headers=auth_headers("u1"))

        assert response.status_code == 404
        assert response.json()["kind"] == "SubjectNotFound"

    async def test_body_shelter_cannot_override_task_shelter(self, client, shelter_graph):
        # u3 is admin of org2 only
        response = await client.patch(
            "/tasks/t1", json={"title": "Hijack", "shelter_id": "org2"}, headers=auth_headers("u3")
        )

        assert response.status_code == 403

    async def test_query_shelter_cannot_override_task_shelter(self, client, shelter_graph):
        response = await client.get("/tasks/t1", params={"shelter_id": "org2"}, headers=auth_headers("u3"))

        assert response.status_code == 403

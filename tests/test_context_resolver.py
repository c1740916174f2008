"""Tests for shelter context resolution."""
import pytest

from shelterhub.core.errors import (
    MissingActor,
    OrganizationNotFound,
    OrganizationUnresolvable,
    SubjectNotFound,
)
from shelterhub.features.permissions.context import (
    RESOLUTION_STRATEGIES,
    ResolutionRequest,
    resolve_access,
)
from shelterhub.features.permissions.dependencies import build_resolution_request
from shelterhub.features.shelters.models import MembershipRole
from shelterhub.features.tasks.models import Task


class TestResolutionOrder:
    """The first source that names a shelter wins."""

    def test_strategy_order(self):
        assert [strategy.__name__ for strategy in RESOLUTION_STRATEGIES] == [
            "from_explicit_shelter",
            "from_loaded_task",
            "from_task_path",
            "from_animal_path",
            "from_body",
        ]

    async def test_explicit_shelter_beats_body(self, shelter_graph):
        request = ResolutionRequest(actor_id="u1", shelter_id="org2", body_shelter_id="org1")
        ctx = await resolve_access(request, shelter_graph)

        assert ctx.shelter_id == "org2"
        assert ctx.source == "path"

    async def test_loaded_task_beats_path_subject(self, shelter_graph):
        task = await shelter_graph.get(Task, "t1")
        request = ResolutionRequest(actor_id="u2", task=task, subject="animals", subject_id="missing")
        ctx = await resolve_access(request, shelter_graph)

        assert ctx.shelter_id == "org1"
        assert ctx.task is task
        assert ctx.animal is None

    async def test_task_path(self, shelter_graph):
        ctx = await resolve_access(
            ResolutionRequest(actor_id="u2", subject="tasks", subject_id="t1"), shelter_graph
        )

        assert ctx.shelter_id == "org1"
        assert ctx.task.id == "t1"
        assert ctx.source == "task"

    async def test_animal_path(self, shelter_graph):
        ctx = await resolve_access(
            ResolutionRequest(actor_id="u1", subject="animals", subject_id="r2"), shelter_graph
        )

        assert ctx.shelter_id == "org1"
        assert ctx.animal.id == "r2"
        assert ctx.task is None

    async def test_body_is_last_resort(self, shelter_graph):
        ctx = await resolve_access(ResolutionRequest(actor_id="u4", body_shelter_id="org2"), shelter_graph)

        assert ctx.shelter_id == "org2"
        assert ctx.source == "body"

    def test_query_shelter_only_used_without_subject(self):
        listing = build_resolution_request("u1", {}, None, None, {"shelter_id": "org1"})
        task_route = build_resolution_request("u1", {"task_id": "t1"}, "tasks", None, {"shelter_id": "org2"})

        assert listing.shelter_id == "org1"
        assert task_route.shelter_id is None
        assert task_route.subject_id == "t1"


class TestRoles:

    @pytest.mark.parametrize(
        "actor_id, role, is_admin, is_member",
        [
            ("u1", MembershipRole.ADMIN, True, False),
            ("u2", MembershipRole.MEMBER, False, True),
            ("u4", None, False, False),
        ],
    )
    async def test_role_triple(self, shelter_graph, actor_id, role, is_admin, is_member):
        ctx = await resolve_access(ResolutionRequest(actor_id=actor_id, shelter_id="org1"), shelter_graph)

        assert ctx.role == role
        assert ctx.is_admin is is_admin
        assert ctx.is_member is is_member
        assert ctx.is_any_member is (is_admin or is_member)
        assert ctx.shelter.handle == "org1"


class TestResolutionFailures:

    async def test_missing_actor(self, shelter_graph):
        with pytest.raises(MissingActor):
            await resolve_access(ResolutionRequest(actor_id=None, shelter_id="org1"), shelter_graph)

    async def test_unresolvable(self, shelter_graph):
        with pytest.raises(OrganizationUnresolvable) as exc_info:
            await resolve_access(ResolutionRequest(actor_id="u1"), shelter_graph)
        assert exc_info.value.kind == "OrganizationUnresolvable"

    async def test_shelter_not_found(self, shelter_graph):
        with pytest.raises(OrganizationNotFound):
            await resolve_access(ResolutionRequest(actor_id="u1", body_shelter_id="nope"), shelter_graph)

    async def test_task_not_found(self, shelter_graph):
        with pytest.raises(SubjectNotFound) as exc_info:
            await resolve_access(
                ResolutionRequest(actor_id="u1", subject="tasks", subject_id="nope"), shelter_graph
            )
        assert "Task" in exc_info.value.message

    async def test_animal_not_found(self, shelter_graph):
        with pytest.raises(SubjectNotFound):
            await resolve_access(
                ResolutionRequest(actor_id="u1", subject="animals", subject_id="nope"), shelter_graph
            )


class TestTaskCaching:

    async def test_resolved_task_is_reused(self, shelter_graph, session_factory, statements):
        async with session_factory() as fresh:
            ctx = await resolve_access(
                ResolutionRequest(actor_id="u2", subject="tasks", subject_id="t1"), fresh
            )
            assert any("FROM tasks" in statement for statement in statements)

            statements.clear()
            again = await resolve_access(ResolutionRequest(actor_id="u2", task=ctx.task), fresh)

            assert again.shelter_id == "org1"
            assert again.task is ctx.task
            assert not any("FROM tasks" in statement for statement in statements)

    async def test_gate_and_handler_share_one_lookup(self, shelter_graph, client, statements):
        from conftest import auth_headers

        statements.clear()
        response = await client.get("/tasks/t1", headers=auth_headers("u2"))

        assert response.status_code == 200
        assert response.json()["shelter_id"] == "org1"
        assert sum("FROM tasks" in statement for statement in statements) == 1

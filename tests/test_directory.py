"""Tests for container listing, filtering and resolution."""

import asyncio

import pytest

from dockmon.config import FilterConfig
from dockmon.directory import ContainerDirectory, name_matches, state_matches
from dockmon.errors import NotFoundError, RuntimeUnavailableError
from dockmon.gateway import StreamGateway

from conftest import FakeRuntime, raw_container


@pytest.mark.parametrize("name,allow,expected", [
    ("web-1", None, True),
    ("web-1", (), True),
    ("web-1", ("web",), True),
    ("web", ("web-1",), True),
    ("web-worker", ("web",), True),
    ("db", ("web",), False),
    ("api", ("web", "api-gateway"), True),
])
def test_name_matches_is_symmetric_substring(name, allow, expected):
    assert name_matches(name, allow) is expected


@pytest.mark.parametrize("state,allow,expected", [
    ("running", None, True),
    ("exited", (), True),
    ("running", ("running",), True),
    ("Running", ("running",), True),
    ("exited", ("running", "paused"), False),
    ("run", ("running",), False),
])
def test_state_matches_is_exact(state, allow, expected):
    assert state_matches(state, allow) is expected


def test_snapshot_without_filters(runtime):
    directory = ContainerDirectory(runtime, FilterConfig())
    snapshot = asyncio.run(directory.snapshot())

    assert [c.name for c in snapshot.containers] == ["web-1", "web-worker", "db"]
    assert snapshot.total == 3
    assert snapshot.filtered == 3


def test_snapshot_include_all_with_state_filter(runtime):
    directory = ContainerDirectory(runtime, FilterConfig(states=("exited",)))
    snapshot = asyncio.run(directory.snapshot(include_all=True))

    assert [c.name for c in snapshot.containers] == ["old-job"]
    assert snapshot.total == 4


def test_list_with_loose_name_filter(runtime):
    directory = ContainerDirectory(runtime, FilterConfig(names=("web",)))
    containers = asyncio.run(directory.list())

    assert [c.name for c in containers] == ["web-1", "web-worker"]


def test_resolve_requires_exact_name(runtime):
    directory = ContainerDirectory(runtime, FilterConfig())

    assert asyncio.run(directory.resolve("web-1")).id == "aaa111"
    with pytest.raises(NotFoundError) as exc:
        asyncio.run(directory.resolve("web"))
    assert exc.value.message == "Container 'web' not found"


def test_resolve_ignores_allow_lists(runtime):
    directory = ContainerDirectory(runtime, FilterConfig(names=("web",)))
    assert asyncio.run(directory.resolve("db")).name == "db"


def test_resolve_first_match_wins():
    runtime = FakeRuntime([raw_container("one", "dup"), raw_container("two", "dup")])
    directory = ContainerDirectory(runtime, FilterConfig())
    assert asyncio.run(directory.resolve("dup")).id == "one"


def test_resolve_only_considers_running_containers(runtime):
    directory = ContainerDirectory(runtime, FilterConfig())
    with pytest.raises(NotFoundError):
        asyncio.run(directory.resolve("old-job"))


def test_unavailable_runtime_is_reported(containers):
    directory = ContainerDirectory(FakeRuntime(containers, available=False), FilterConfig())
    with pytest.raises(RuntimeUnavailableError):
        asyncio.run(directory.snapshot())


def test_queries_do_not_modify_runtime_state(runtime, containers):
    before = [dict(c) for c in containers]
    directory = ContainerDirectory(runtime, FilterConfig(names=("web",), states=("running",)))

    asyncio.run(directory.snapshot(include_all=True))
    asyncio.run(directory.resolve("web-1"))

    assert runtime.containers == before


def test_attach_and_detach_leave_directory_unchanged(runtime):
    directory = ContainerDirectory(runtime, FilterConfig(names=("web",)))
    gateway = StreamGateway(runtime)

    async def send(event):
        pass

    async def scenario():
        before = await directory.snapshot(include_all=True)
        container = await directory.resolve("web-1")
        handle = await gateway.attach(container, send)
        await asyncio.sleep(0)
        await gateway.detach(handle)
        after = await directory.snapshot(include_all=True)
        return before, after, handle

    before, after, handle = asyncio.run(scenario())

    assert after.containers == before.containers
    assert (after.total, after.filtered) == (before.total, before.filtered)
    assert handle.stream.closed

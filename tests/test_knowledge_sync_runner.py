"""Tests for the one-shot sync runner and its exit codes."""

import pytest

from fakes import FakeCMSClient, FakeEmbedClient, FakeKnowledgeClient, make_cms_post


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    from services.knowledge_sync import knowledge_sync
    return knowledge_sync


@pytest.fixture
def clients(runner, monkeypatch):
    clients = {
        "cms": FakeCMSClient([make_cms_post(1), make_cms_post(2)]),
        "knowledge": FakeKnowledgeClient(),
        "embed": FakeEmbedClient(default=[0.5, 0.5]),
    }

    class FakeClientManager:
        def __init__(self, helper_config, client_type):
            self.client = clients[client_type]

        def get_client(self):
            return self.client

    monkeypatch.setattr(runner, "ClientManager", FakeClientManager)
    return clients


@pytest.mark.asyncio
async def test_successful_run_exits_zero(runner, clients):
    assert await runner.main() == 0
    assert sorted(clients["knowledge"].records) == ["1", "2"]
    assert all(c.closed for c in clients.values())


@pytest.mark.asyncio
async def test_failed_post_exits_two(runner, clients):
    clients["knowledge"].failing_ids = {"2"}

    assert await runner.main() == 2
    assert list(clients["knowledge"].records) == ["1"]


@pytest.mark.asyncio
async def test_listing_failure_exits_one(runner, clients):
    clients["cms"].error = RuntimeError("cms down")

    assert await runner.main() == 1
    assert all(c.closed for c in clients.values())


@pytest.mark.asyncio
async def test_boot_failure_exits_one(runner, clients):
    clients["knowledge"].boot_error = RuntimeError("no token")

    assert await runner.main() == 1
    assert clients["cms"].calls == 0
    assert all(c.closed for c in clients.values())


@pytest.mark.asyncio
async def test_unhealthy_cms_exits_one(runner, clients):
    clients["cms"].healthy = False

    assert await runner.main() == 1
    assert clients["cms"].calls == 0


@pytest.mark.asyncio
async def test_missing_embedding_key_still_stores_posts(runner, clients):
    clients["embed"].credentials = False
    clients["embed"].default = None

    assert await runner.main() == 0
    assert clients["knowledge"].records["1"].embedding is None

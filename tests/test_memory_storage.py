"""
In-memory storage tests — the double must honour the same contract as the
SQL backend, or service tests built on it would prove nothing.
"""
from datetime import date

import pytest

from app.entities import Post, Role, User
from app.errors import Conflict, NotFound, StorageError, Timeout
from app.repositories import InMemoryStorage
from app.security import hash_password


@pytest.mark.asyncio
async def test_ids_and_dates_are_assigned_by_storage():
    storage = InMemoryStorage(today=lambda: date(2024, 6, 1))
    first = await storage.create_post(Post(title="a", body="x", id=50))
    second = await storage.create_post(Post(title="b", body="x"))
    assert (first.id, second.id) == (1, 2)
    assert first.created_at == first.updated_at == date(2024, 6, 1)


@pytest.mark.asyncio
async def test_unique_title_and_email(memory_storage: InMemoryStorage):
    await memory_storage.create_post(Post(title="a", body="x"))
    with pytest.raises(Conflict):
        await memory_storage.create_post(Post(title="a", body="y"))

    await memory_storage.create_user(User(email="a@b.com", password=hash_password("p")))
    with pytest.raises(Conflict):
        await memory_storage.create_user(User(email="a@b.com", password=hash_password("q")))


@pytest.mark.asyncio
async def test_update_may_keep_its_own_title(memory_storage: InMemoryStorage):
    post = await memory_storage.create_post(Post(title="a", body="x"))
    post.body = "changed"
    updated = await memory_storage.update_post(post)
    assert updated.title == "a"
    assert updated.body == "changed"


@pytest.mark.asyncio
async def test_undecodable_row_fails_whole_read(memory_storage: InMemoryStorage):
    await memory_storage.create_post(Post(title="a", body="x"))
    await memory_storage.create_post(Post(title="b", body="y"))
    memory_storage.posts[2]["md_body"] = None

    with pytest.raises(StorageError):
        await memory_storage.get_all_posts()
    # The healthy row is still readable on its own.
    assert (await memory_storage.get_one_post(1)).title == "a"


@pytest.mark.asyncio
async def test_latency_beyond_deadline_times_out():
    storage = InMemoryStorage(timeout=0.01, latency=0.2)
    with pytest.raises(Timeout) as exc_info:
        await storage.create_post(Post(title="slow", body="x"))
    assert exc_info.value.operation == "create_post"
    # The cancelled write never landed.
    assert storage.posts == {}


@pytest.mark.asyncio
async def test_missing_rows_are_not_found(memory_storage: InMemoryStorage):
    with pytest.raises(NotFound):
        await memory_storage.get_one_post(1)
    with pytest.raises(NotFound):
        await memory_storage.delete_user(1)
    with pytest.raises(NotFound):
        await memory_storage.update_password(User(id=1, email="a", password=hash_password("p")))


@pytest.mark.asyncio
async def test_custom_roles():
    storage = InMemoryStorage(roles=[Role(id=7, role_name="editor")])
    assert [r.role_name for r in await storage.get_all_roles()] == ["editor"]
    with pytest.raises(NotFound):
        await storage.get_one_role(1)

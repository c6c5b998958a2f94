"""
Post service tests — validation, title normalization and error propagation,
run against the in-memory storage.
"""
from unittest.mock import AsyncMock

import pytest

from app.entities import Post
from app.errors import NotFound, Timeout, ValidationError
from app.repositories import InMemoryStorage
from app.services import PostService


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "title,body",
    [("", "text"), ("Title", ""), ("", "")],
)
async def test_create_rejects_empty_fields_before_storage(title, body):
    storage = AsyncMock()
    service = PostService(storage)

    with pytest.raises(ValidationError):
        await service.create(Post(title=title, body=body))

    storage.create_post.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_lowercases_title(post_service: PostService):
    created = await post_service.create(Post(title="Hello World", body="text"))
    fetched = await post_service.get_one(created.id)
    assert fetched.title == "hello world"
    assert fetched.body == "text"


@pytest.mark.asyncio
async def test_create_does_not_mutate_callers_post(post_service: PostService):
    post = Post(title="Mixed Case", body="text")
    await post_service.create(post)
    assert post.title == "Mixed Case"
    assert post.id is None


@pytest.mark.asyncio
async def test_create_passes_missing_author_through(post_service: PostService):
    created = await post_service.create(Post(title="No Author", body="text"))
    assert created.author_id == 0


@pytest.mark.asyncio
async def test_get_all_returns_single_lowercased_post(post_service: PostService):
    await post_service.create(Post(title="Hello World", body="text"))
    posts = await post_service.get_all()
    assert [p.title for p in posts] == ["hello world"]


@pytest.mark.asyncio
async def test_update_lowercases_title_and_keeps_body(post_service: PostService):
    created = await post_service.create(Post(title="first", body="original body"))
    created.title = "New MIXED Title"

    await post_service.update(created)

    fetched = await post_service.get_one(created.id)
    assert fetched.title == "new mixed title"
    assert fetched.body == "original body"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "title,body",
    [("", "text"), ("title", "")],
)
async def test_update_rejects_empty_fields_before_storage(title, body):
    storage = AsyncMock()
    service = PostService(storage)

    with pytest.raises(ValidationError):
        await service.update(Post(id=1, title=title, body=body))
    storage.update_post.assert_not_awaited()


@pytest.mark.asyncio
async def test_get_one_missing_is_not_found(post_service: PostService):
    with pytest.raises(NotFound) as exc_info:
        await post_service.get_one(999)
    assert exc_info.value.entity == "post"
    assert exc_info.value.entity_id == 999


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found(post_service: PostService):
    created = await post_service.create(Post(title="gone", body="soon"))
    await post_service.delete(created.id)
    with pytest.raises(NotFound):
        await post_service.get_one(created.id)


@pytest.mark.asyncio
async def test_storage_timeout_propagates_unchanged():
    service = PostService(InMemoryStorage(timeout=0.01, latency=0.5))
    with pytest.raises(Timeout):
        await service.get_all()

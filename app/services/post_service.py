"""
Post service — validation and normalization for the Post entity.

Titles are stored lowercased, so "Hello World" and "hello world" collide on
the unique title constraint.  The service never fetches before writing:
``update`` expects a complete post (the router merges partial changes
against the stored one first).
"""
from dataclasses import replace

from app.entities import Post
from app.errors import ValidationError
from app.repositories import PostRepository


class PostService:
    def __init__(self, storage: PostRepository) -> None:
        self.storage = storage

    async def create(self, post: Post) -> Post:
        """Validate and lowercase *post*, then store it; ``author_id`` passes through as given."""
        if not post.title:
            raise ValidationError("blog post - title is required", field="title")
        if not post.body:
            raise ValidationError("blog post - body is required", field="body")

        return await self.storage.create_post(replace(post, title=post.title.lower()))

    async def get_all(self) -> list[Post]:
        return await self.storage.get_all_posts()

    async def get_one(self, post_id: int) -> Post:
        return await self.storage.get_one_post(post_id)

    async def update(self, post: Post) -> Post:
        if not post.title:
            raise ValidationError("blog post - title cannot be empty", field="title")
        if not post.body:
            raise ValidationError("blog post - body cannot be empty", field="body")
        return await self.storage.update_post(replace(post, title=post.title.lower()))

    async def delete(self, post_id: int) -> None:
        await self.storage.delete_post(post_id)

from fastapi import APIRouter, Depends

from app.dependencies import get_post_service
from app.entities import Post
from app.schemas import PostCreate, PostResponse, PostUpdate, envelope
from app.services import PostService
from app.services.updates import merge

router = APIRouter(prefix="/v1/api/posts", tags=["posts"])


def _post_out(post: Post) -> PostResponse:
    return PostResponse.model_validate(post)


@router.post("", status_code=201)
async def create_post(data: PostCreate, posts: PostService = Depends(get_post_service)):
    post = await posts.create(Post(title=data.title, body=data.md_body, author_id=data.author_id))
    return envelope(_post_out(post))


@router.get("")
async def list_posts(posts: PostService = Depends(get_post_service)):
    return envelope([_post_out(p) for p in await posts.get_all()])


@router.get("/{post_id}")
async def get_post(post_id: int, posts: PostService = Depends(get_post_service)):
    return envelope(_post_out(await posts.get_one(post_id)))


@router.put("/{post_id}")
async def update_post(post_id: int, data: PostUpdate, posts: PostService = Depends(get_post_service)):
    current = await posts.get_one(post_id)
    changes = data.model_dump(exclude_unset=True)
    if "md_body" in changes:
        changes["body"] = changes.pop("md_body")
    post = await posts.update(merge(current, changes))
    return envelope(_post_out(post))


@router.delete("/{post_id}")
async def delete_post(post_id: int, posts: PostService = Depends(get_post_service)):
    await posts.delete(post_id)
    return envelope("post deleted successfully")

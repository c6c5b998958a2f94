from fastapi import Request

from app.services import PostService, UserService


def get_post_service(request: Request) -> PostService:
    """
    FastAPI dependency returning the ``PostService`` built at startup.

    The services live on ``app.state`` (set by the lifespan in ``app.main``,
    or directly by the tests), so every request shares one repository and
    therefore one connection pool.
    """
    return request.app.state.post_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service

from fastapi import APIRouter

from app.schemas import envelope

router = APIRouter(prefix="/v1/api", tags=["status"])


@router.get("/status")
async def api_status():
    return envelope("blog post API is running properly")

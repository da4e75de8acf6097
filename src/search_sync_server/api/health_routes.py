from fastapi import APIRouter
from ..config import settings

router = APIRouter(tags=["health"])

@router.get("/health")
def health():
    return {
        "status": "ok",
        "search_server": str(settings.es_server_url),
        "active_generation": settings.active_generation,
    }

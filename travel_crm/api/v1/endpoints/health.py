from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from travel_crm.core.database import ping_database
from travel_crm.api.deps import get_redis_client

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health(redis_client: Optional[Redis] = Depends(get_redis_client)):
    """Liveness plus dependency status.

    The database is required; Redis is optional and only reported.
    """
    database_ok = await ping_database()
    body = {
        "status": "ok" if database_ok else "degraded",
        "database": "up" if database_ok else "down",
        "redis": "up" if redis_client is not None else "down",
    }
    return JSONResponse(status_code=200 if database_ok else 503, content=body)

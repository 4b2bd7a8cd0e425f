from fastapi import APIRouter, Depends

from app.api.deps import get_timecard_service
from app.core.config import settings
from timecard.errors import FetchError
from timecard.service import TimecardService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Liveness probe")
def healthcheck(service: TimecardService = Depends(get_timecard_service)) -> dict[str, str]:
    try:
        service.fetch_events()
    except FetchError:
        return {"status": "degraded", "environment": settings.env, "store": "unreadable"}
    return {"status": "ok", "environment": settings.env, "store": "ok"}

from functools import lru_cache

from app.core.config import get_settings
from timecard.service import TimecardService, build_service


@lru_cache
def get_timecard_service() -> TimecardService:
    # One service per process so in-flight submissions are tracked across requests.
    return build_service(get_settings())

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import health
from app.core.config import settings
from app.core.monitoring import configure_error_monitoring
from app.core.observability import configure_observability
from app.domains.timecards.router import router as timecards_router
from timecard.logging import configure_logging, get_logger

configure_logging(settings.log_level, json=settings.log_json)
configure_observability(settings)
configure_error_monitoring(settings)
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(timecards_router)


@app.on_event("startup")
def startup_event() -> None:
    logger.info("startup_complete", env=settings.env, store=str(settings.store_path))


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Timecard API running", "environment": settings.env}

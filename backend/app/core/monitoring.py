import sentry_sdk

from app.core.config import ApiSettings


def configure_error_monitoring(settings: ApiSettings) -> bool:
    if not settings.sentry_dsn:
        return False
    sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.env, traces_sample_rate=0.2)
    return True

import sentry_sdk

from safe_ledger.core.config import settings
from safe_ledger.errors import LedgerError, TransientStoreError


def drop_expected_errors(event, hint):
    """Business-rule rejections are answers, not incidents; store outages still report."""
    exc_info = hint.get("exc_info")
    if exc_info:
        exc = exc_info[1]
        if isinstance(exc, LedgerError) and not isinstance(exc, TransientStoreError):
            return None
    return event


def configure_error_monitoring() -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.env,
            traces_sample_rate=0.2,
            before_send=drop_expected_errors,
        )

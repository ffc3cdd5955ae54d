import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from taxbook.core.config import settings

logger = logging.getLogger(__name__)

_initialized = False


def init_monitoring() -> None:
    """Start Sentry when a DSN is configured.

    Report requests carry users' full transaction lists, so request bodies and
    default PII are never attached to events.
    """
    global _initialized
    if _initialized:
        return
    if settings.SENTRY_DSN:
        try:
            sentry_sdk.init(
                dsn=settings.SENTRY_DSN,
                integrations=[FastApiIntegration()],
                traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
                environment=settings.ENV,
                release=f"taxbook-backend@{settings.ENV}",
                send_default_pii=False,
                max_request_body_size="never",
            )
            sentry_sdk.set_tag("component", "pl-engine")
            sentry_sdk.set_tag("pl_inclusion_policy", settings.PL_INCLUSION_POLICY)
            logger.info("Sentry initialized (traces_sample_rate=%s)", settings.SENTRY_TRACES_SAMPLE_RATE)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to init Sentry: %s", exc)
    _initialized = True

import sentry_sdk

from hubproxy.settings import settings


def init_sentry():
    if not settings.SENTRY_DSN:
        return

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=0.01,
        send_default_pii=False,
        environment=settings.SENTRY_ENVIRONMENT,
    )

"""
Factory functions for dependency injection.

Provides application-scoped singleton providers for core infrastructure services.
"""

from functools import lru_cache

from infrastructure.configuration import Settings
from infrastructure.notifications import (
    DeliveryConfig,
    QueuedDeliveryWorker,
    SlackChatClient,
)


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    The @lru_cache decorator ensures only ONE instance is created per process.

    Application code should use the DI type alias for testability:
        from infrastructure.services import SettingsDep
        @router.get("/version")
        def get_version(settings: SettingsDep):
            return {"version": settings.GIT_SHA}

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()


@lru_cache
def get_delivery_worker() -> QueuedDeliveryWorker:
    """
    Get the application-scoped delivery worker.

    The worker is created stopped; the server lifespan starts it and drains
    it on shutdown.

    Returns:
        QueuedDeliveryWorker: Cached worker posting through the Slack Web API.
    """
    settings = get_settings()
    return QueuedDeliveryWorker(
        client=SlackChatClient(),
        config=DeliveryConfig.from_settings(settings.delivery),
    )

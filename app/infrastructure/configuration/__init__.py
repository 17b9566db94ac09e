"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the bridge
using Pydantic BaseSettings with domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    DeliverySettings: Delivery queue settings class (for testing)

Example:
    ```python
    from infrastructure.configuration import settings

    slack_token = settings.slack.SLACK_TOKEN
    max_attempts = settings.delivery.max_attempts
    ```
"""

from infrastructure.configuration.settings import Settings, settings
from infrastructure.configuration.infrastructure.delivery import DeliverySettings

__all__ = ["Settings", "settings", "DeliverySettings"]

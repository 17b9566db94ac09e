"""Slack integration settings."""

from infrastructure.configuration.base import IntegrationSettings


class SlackSettings(IntegrationSettings):
    """Slack API and bot configuration.

    Environment Variables:
        SLACK_TOKEN: Slack bot token (xoxb-*)
        SLACK_TIMEOUT_SECONDS: Timeout applied to every Slack Web API call

    Example:
        ```python
        from infrastructure.configuration import settings

        slack_token = settings.slack.SLACK_TOKEN
        ```
    """

    SLACK_TOKEN: str = ""
    SLACK_TIMEOUT_SECONDS: int = 10

from slack_sdk import WebClient
from infrastructure.configuration import settings


class SlackClientManager:
    """Manages the Slack API client. Ensures a single instance is used throughout the application."""

    _client = None

    @classmethod
    def get_client(cls) -> WebClient:
        """Returns a singleton instance of the Slack WebClient.

        The client's timeout bounds every delivery attempt.
        """
        if cls._client is None:
            cls._client = WebClient(
                token=settings.slack.SLACK_TOKEN,
                timeout=settings.slack.SLACK_TIMEOUT_SECONDS,
            )
        return cls._client

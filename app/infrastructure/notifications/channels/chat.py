"""Chat client implementation using the Slack Web API."""

from typing import Optional

from slack_sdk import WebClient

import structlog
from infrastructure.notifications.channels.base import ChatClient
from infrastructure.notifications.models import DeliveryRequest
from infrastructure.operations import OperationResult, classify_slack_error
from integrations.slack.client import SlackClientManager

logger = structlog.get_logger()


class SlackChatClient(ChatClient):
    """Posts delivery requests to Slack with ``chat.postMessage``.

    Channel recipients are posted by name; user recipients are posted to
    their direct-message target (a user id or ``@name``). The per-attempt
    timeout is the one configured on the WebClient.
    """

    def __init__(self, client: Optional[WebClient] = None):
        """Initialize the Slack chat client.

        Args:
            client: Optional WebClient. Defaults to the shared client from
                SlackClientManager.
        """
        self._client = client

    @property
    def client_name(self) -> str:
        """Client identifier."""
        return "slack"

    def _get_client(self) -> WebClient:
        if self._client is None:
            self._client = SlackClientManager.get_client()
        return self._client

    def send(self, request: DeliveryRequest) -> OperationResult:
        """Post one message to Slack.

        Args:
            request: DeliveryRequest to post

        Returns:
            OperationResult with the message timestamp in data on success
        """
        try:
            response = self._get_client().chat_postMessage(**request.to_slack())
        except Exception as e:  # pylint: disable=broad-except
            result = classify_slack_error(e)
            logger.warning(
                "slack_post_message_failed",
                recipient=request.recipient.key,
                error=result.message,
                error_code=result.error_code,
                retryable=result.is_retryable,
            )
            return result

        if not response.get("ok", False):
            return OperationResult.permanent_error(
                message=f"Failed to send message: {response.get('error')}",
                error_code=response.get("error"),
            )

        return OperationResult.success(
            message="Slack message sent",
            data={"ts": response.get("ts"), "channel": response.get("channel")},
        )

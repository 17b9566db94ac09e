"""Outbound chat clients."""

from infrastructure.notifications.channels.base import ChatClient
from infrastructure.notifications.channels.chat import SlackChatClient

__all__ = ["ChatClient", "SlackChatClient"]

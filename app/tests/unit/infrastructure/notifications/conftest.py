"""Test fixtures for notification infrastructure tests."""

from typing import Optional

import pytest

from infrastructure.notifications import (
    ChannelRecipient,
    DeliveryRequest,
    UserRecipient,
)
from tests.factories.notifications import ScriptedClient


@pytest.fixture
def scripted_client():
    return ScriptedClient()


@pytest.fixture
def request_factory():
    """Factory for DeliveryRequest instances.

    Example:
        request = request_factory("hello", channel="reviews")
        dm = request_factory("hi", user="U123")
    """

    def _factory(
        text: str = "hello",
        channel: Optional[str] = "reviews",
        user: Optional[str] = None,
    ) -> DeliveryRequest:
        recipient = (
            UserRecipient(target=user) if user else ChannelRecipient(target=channel)
        )
        return DeliveryRequest(recipient=recipient, text=text)

    return _factory

"""Chat notification delivery infrastructure.

Value objects describing what to deliver, the outbound Slack client, and the
background worker that keeps outbound calls off the request path.

Usage Example:
    from infrastructure.notifications import (
        Attachment,
        ChannelRecipient,
        DeliveryRequest,
        QueuedDeliveryWorker,
        SlackChatClient,
    )

    worker = QueuedDeliveryWorker(SlackChatClient())
    worker.start()
    worker.accept(
        DeliveryRequest(
            recipient=ChannelRecipient(target="reviews"),
            text="hello",
        )
    )
"""

from infrastructure.notifications.channels import ChatClient, SlackChatClient
from infrastructure.notifications.models import (
    Attachment,
    AttachmentColor,
    ChannelRecipient,
    DeliveryRequest,
    UserRecipient,
)
from infrastructure.notifications.worker import (
    DeliveryConfig,
    DeliveryWorker,
    OverflowPolicy,
    QueuedDeliveryWorker,
)

__all__ = [
    "Attachment",
    "AttachmentColor",
    "ChannelRecipient",
    "ChatClient",
    "DeliveryConfig",
    "DeliveryRequest",
    "DeliveryWorker",
    "OverflowPolicy",
    "QueuedDeliveryWorker",
    "SlackChatClient",
    "UserRecipient",
]

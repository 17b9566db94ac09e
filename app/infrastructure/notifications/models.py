"""Delivery models for the chat notification pipeline.

Platform-facing value objects handed from the messenger to the delivery
worker. Features decide what to say and to whom; the worker and the chat
client decide how it reaches Slack.

Uses Pydantic BaseModel for:
- Immutability (frozen models) once a request has been built
- A closed recipient variant discriminated by ``kind``
- Rejecting empty recipient targets before they reach the outbound client
"""

from enum import Enum
from typing import Annotated, Any, Dict, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttachmentColor(Enum):
    """Slack attachment colors used by the bridge.

    DEFAULT renders without an explicit color.
    """

    DEFAULT = "default"
    GOOD = "good"
    DANGER = "danger"


class Attachment(BaseModel):
    """A single Slack message attachment.

    Attributes:
        body: Attachment text (the comment or review body)
        title: Attachment title
        title_link: URL the title links to
        color: AttachmentColor (default: DEFAULT)
    """

    model_config = ConfigDict(frozen=True)

    body: str
    title: str = ""
    title_link: str = ""
    color: AttachmentColor = AttachmentColor.DEFAULT

    def to_slack(self) -> Dict[str, Any]:
        """Render the attachment in Slack's legacy attachment format."""
        rendered: Dict[str, Any] = {"text": self.body, "fallback": self.body}
        if self.title:
            rendered["title"] = self.title
        if self.title_link:
            rendered["title_link"] = self.title_link
        if self.color is not AttachmentColor.DEFAULT:
            rendered["color"] = self.color.value
        return rendered


class _Recipient(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: str

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        """Ensure the target is not empty."""
        if not v or not v.strip():
            raise ValueError("Recipient target cannot be empty")
        return v

    @property
    def key(self) -> str:
        """Identity used for per-recipient ordering and logging."""
        return f"{self.kind}:{self.target}"


class ChannelRecipient(_Recipient):
    """A Slack channel addressed by name."""

    kind: Literal["channel"] = "channel"


class UserRecipient(_Recipient):
    """A Slack user addressed by direct-message target (user id or @name)."""

    kind: Literal["user"] = "user"


Recipient = Annotated[
    Union[ChannelRecipient, UserRecipient], Field(discriminator="kind")
]


class DeliveryRequest(BaseModel):
    """The unit of work accepted by a DeliveryWorker.

    Attributes:
        recipient: ChannelRecipient or UserRecipient (never empty)
        text: Message text
        attachments: Ordered attachments, delivered in the same order

    Example:
        request = DeliveryRequest(
            recipient=ChannelRecipient(target="reviews"),
            text="Comment on <https://github.com/o/r/pull/1|Fix>",
            attachments=(Attachment(body="LGTM", title="alice said:"),),
        )
    """

    model_config = ConfigDict(frozen=True)

    recipient: Recipient
    text: str
    attachments: Tuple[Attachment, ...] = ()

    def to_slack(self) -> Dict[str, Any]:
        """Keyword arguments for ``WebClient.chat_postMessage``."""
        return {
            "channel": self.recipient.target,
            "text": self.text,
            "attachments": [a.to_slack() for a in self.attachments],
        }

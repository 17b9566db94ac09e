"""Fan-out of GitHub notifications to Slack channels and users.

The Messenger works out who should hear about an event and hands one
DeliveryRequest per recipient to the delivery worker. It never waits on Slack
and never raises for a recipient it cannot reach.
"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.notifications import (
    Attachment,
    ChannelRecipient,
    DeliveryRequest,
    DeliveryWorker,
    UserRecipient,
)
from integrations.slack.formatting import make_link
from models.github import CommitLike, Repo, User
from modules.github.directory import RecipientDirectory

logger = get_module_logger()


@dataclass(frozen=True)
class Notification:
    """One event's worth of message content and routing context."""

    text: str
    attachments: Tuple[Attachment, ...]
    item_owner: User
    sender: User
    repo: Repo
    participants: Tuple[User, ...] = ()
    branch: str = ""
    commits: Tuple[CommitLike, ...] = ()


class Messenger:
    """Resolves channels and individuals for a notification and submits deliveries.

    Attributes:
        directory: RecipientDirectory used for channel and DM lookups
        worker: DeliveryWorker receiving the requests
        bot_login: The bridge's own account; never messaged directly
    """

    def __init__(
        self,
        directory: RecipientDirectory,
        worker: DeliveryWorker,
        bot_login: str,
    ):
        self.directory = directory
        self.worker = worker
        self.bot_login = bot_login

    def notify_participants(self, notification: Notification) -> int:
        """Notify matching channels plus the owner and every participant.

        The sender and the bot are never messaged directly.

        Returns:
            Number of deliveries accepted by the worker
        """
        accepted = len(self._send_to_channels(notification))
        accepted += self._send_to_users(self.recipients(notification), notification)
        return accepted

    def notify_owner_only(self, notification: Notification) -> int:
        """Notify matching channels plus the item owner alone.

        The owner is skipped when it is the sender or the bot.
        """
        accepted = len(self._send_to_channels(notification))
        owner = notification.item_owner
        excluded = {notification.sender.login, self.bot_login}
        users = [] if owner.login in excluded else [owner]
        accepted += self._send_to_users(users, notification)
        return accepted

    def resolve_channels(self, notification: Notification) -> List[str]:
        """Post the notification to every channel routed for its repo and branch.

        Returns:
            Channels the worker accepted a delivery for
        """
        return self._send_to_channels(notification)

    def recipients(self, notification: Notification) -> List[User]:
        """Owner first, then participants in order, deduplicated by login.

        Excludes the sender of the event and the bot account.
        """
        excluded = {notification.sender.login, self.bot_login}
        seen = set()
        users = []
        for user in (notification.item_owner, *notification.participants):
            if user.login in seen or user.login in excluded:
                continue
            seen.add(user.login)
            users.append(user)
        return users

    def _send_to_channels(self, notification: Notification) -> List[str]:
        repo = notification.repo
        try:
            channels = self.directory.lookup_channels(
                repo, notification.branch, notification.commits
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "channel_lookup_failed",
                repo=repo.full_name,
                branch=notification.branch,
                error=str(e),
            )
            return []

        text = f"{notification.text} ({make_link(repo.html_url, repo.full_name)})"
        delivered = []
        for channel in sorted(channels):
            if self._submit(ChannelRecipient, channel, text, notification):
                delivered.append(channel)
        return delivered

    def _send_to_users(
        self, users: Sequence[User], notification: Notification
    ) -> int:
        host = notification.repo.host
        accepted = 0
        for user in users:
            try:
                target = self.directory.direct_message_target(user.login, host)
            except Exception as e:  # pylint: disable=broad-except
                logger.error(
                    "direct_message_lookup_failed", login=user.login, error=str(e)
                )
                continue
            if not target:
                logger.debug("direct_message_not_configured", login=user.login)
                continue
            if self._submit(UserRecipient, target, notification.text, notification):
                accepted += 1
        return accepted

    def _submit(
        self, recipient_type, target: str, text: str, notification: Notification
    ) -> bool:
        key = f"{recipient_type.__name__}:{target}"
        try:
            request = DeliveryRequest(
                recipient=recipient_type(target=target),
                text=text,
                attachments=notification.attachments,
            )
            accepted = self.worker.accept(request)
        except Exception as e:  # pylint: disable=broad-except
            logger.error("delivery_submit_failed", recipient=key, error=str(e))
            return False
        if not accepted:
            logger.warning("delivery_not_accepted", recipient=key)
        return bool(accepted)

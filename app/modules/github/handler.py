"""GitHub webhook event handling.

Classifies an inbound event by its ``X-GitHub-Event`` name, applies the
per-kind filtering rules, builds the notification and passes it to the
Messenger. Every recognized kind is acknowledged, whether or not anything
was sent; unknown kinds are acknowledged as unhandled.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence, Union

from pydantic import ValidationError

from infrastructure.logging import get_module_logger
from infrastructure.notifications import Attachment, AttachmentColor
from integrations.slack.formatting import make_link
from models.github import HookBody, PullRequest, User, WebhookResponse
from modules.github.directory import BRANCH_REF_PREFIX, RecipientDirectory
from modules.github.messenger import Messenger, Notification

logger = get_module_logger()

MAX_PUSH_COMMITS = 5

# review state -> (action text, title suffix, color)
REVIEW_STATES = {
    "changes_requested": ("requested changes to", "Changes Requested", AttachmentColor.DANGER),
    "approved": ("approved", "Approved", AttachmentColor.GOOD),
}


class GithubEventKind(Enum):
    """Event kinds the bridge understands, plus an explicit catch-all."""

    PING = "ping"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_REVIEW = "pull_request_review"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    COMMIT_COMMENT = "commit_comment"
    ISSUE_COMMENT = "issue_comment"
    PUSH = "push"
    UNHANDLED = "unhandled"

    @classmethod
    def parse(cls, name: str) -> "GithubEventKind":
        """Map an event name to a kind; anything unknown is UNHANDLED."""
        try:
            return cls(name)
        except ValueError:
            return cls.UNHANDLED


class GithubWebhookHandler:
    """Dispatches webhook events to per-kind handlers.

    Holds no per-event state, so one instance serves concurrent requests.

    Attributes:
        messenger: Messenger receiving notifications
        directory: RecipientDirectory used for display names
        notify_on_push: Post push summaries to routed channels
    """

    def __init__(
        self,
        messenger: Messenger,
        directory: RecipientDirectory,
        notify_on_push: bool = False,
    ):
        self.messenger = messenger
        self.directory = directory
        self.notify_on_push = notify_on_push
        self._handlers: Dict[GithubEventKind, Callable[[HookBody], str]] = {
            GithubEventKind.PING: self.handle_ping,
            GithubEventKind.PULL_REQUEST: self.handle_pr,
            GithubEventKind.PULL_REQUEST_REVIEW: self.handle_pr_review,
            GithubEventKind.PULL_REQUEST_REVIEW_COMMENT: self.handle_pr_review_comment,
            GithubEventKind.COMMIT_COMMENT: self.handle_commit_comment,
            GithubEventKind.ISSUE_COMMENT: self.handle_issue_comment,
            GithubEventKind.PUSH: self.handle_push,
        }
        missing = set(GithubEventKind) - set(self._handlers) - {GithubEventKind.UNHANDLED}
        if missing:
            raise ValueError(f"No handler for event kinds: {sorted(k.value for k in missing)}")

    def dispatch(
        self, event_kind: str, payload: Union[HookBody, Dict[str, Any], None]
    ) -> WebhookResponse:
        """Handle one inbound event.

        Args:
            event_kind: Value of the ``X-GitHub-Event`` header
            payload: Parsed JSON body, or an already validated HookBody

        Returns:
            WebhookResponse; always status 200
        """
        kind = GithubEventKind.parse(event_kind)
        logger.info("github_event_received", github_event=event_kind, kind=kind.value)

        if kind is GithubEventKind.UNHANDLED:
            return WebhookResponse(message=f"Unhandled event: {event_kind}", handled=False)

        try:
            data = (
                payload
                if isinstance(payload, HookBody)
                else HookBody.model_validate(payload or {})
            )
        except ValidationError as e:
            logger.warning(
                "github_payload_invalid",
                github_event=event_kind,
                error_count=e.error_count(),
                error=str(e),
            )
            return WebhookResponse(message=kind.value)

        try:
            message = self._handlers[kind](data)
        except Exception as e:  # pylint: disable=broad-except
            logger.exception(
                "github_event_handler_failed", github_event=event_kind, error=str(e)
            )
            message = kind.value

        logger.info("github_event_handled", github_event=event_kind, result=message)
        return WebhookResponse(message=message)

    def _name(self, login: str, data: HookBody) -> str:
        host = data.repository.host if data.repository else None
        return self.directory.display_name(login, host)

    def _names(self, users: Sequence[User], data: HookBody) -> str:
        return ", ".join(self._name(user.login, data) for user in users)

    def handle_ping(self, data: HookBody) -> str:
        return "ping"

    def handle_pr(self, data: HookBody) -> str:
        pull_request = data.pull_request
        if pull_request is None or not _routable(data):
            return "pr"

        action = data.action
        actor = self._name(data.sender.login, data)
        participants = list(pull_request.assignees)

        if action in ("opened", "reopened"):
            msg = f"Pull Request {action} by {actor}"
            participants += pull_request.requested_reviewers
        elif action == "closed":
            verb = "merged" if pull_request.merged else "closed"
            msg = f"Pull Request {verb} by {actor}"
            if pull_request.merged:
                self.messenger.notify_owner_only(
                    self._pr_notification(msg, pull_request, data, participants)
                )
                return "pr"
        elif action == "assigned":
            if not pull_request.assignees:
                return "pr"
            msg = f"Pull Request assigned to {self._names(pull_request.assignees, data)}"
        elif action == "review_requested":
            reviewers = list(pull_request.requested_reviewers)
            if not reviewers and data.requested_reviewer is not None:
                reviewers = [data.requested_reviewer]
            if not reviewers:
                return "pr"
            msg = f"Review requested from {self._names(reviewers, data)}"
            participants = reviewers
        else:
            return "pr"

        self.messenger.notify_participants(
            self._pr_notification(msg, pull_request, data, participants)
        )
        return "pr"

    def _pr_notification(
        self,
        msg: str,
        pull_request: PullRequest,
        data: HookBody,
        participants: Sequence[User],
    ) -> Notification:
        title = pull_request.title
        if pull_request.number is not None:
            title = f"#{pull_request.number}: {title}"
        attachment = Attachment(
            body=pull_request.body,
            title=title,
            title_link=pull_request.html_url,
        )
        return Notification(
            text=msg,
            attachments=(attachment,),
            item_owner=pull_request.user,
            sender=data.sender,
            repo=data.repository,
            participants=tuple(participants),
            branch=pull_request.target_branch,
            commits=(pull_request,),
        )

    def handle_pr_review_comment(self, data: HookBody) -> str:
        if (
            data.pull_request is not None
            and data.comment is not None
            and data.action == "created"
            and _routable(data)
        ):
            self.do_pull_request_comment(
                data.pull_request,
                data.comment.user,
                data.comment.body,
                data.comment.html_url,
                data,
            )
        return "pr_review_comment"

    def handle_pr_review(self, data: HookBody) -> str:
        pull_request = data.pull_request
        review = data.review
        if (
            pull_request is None
            or review is None
            or data.action != "submitted"
            or not _routable(data)
        ):
            return "pr_review"

        # a plain review comment reads like any other PR comment
        if review.state == "commented":
            self.do_pull_request_comment(
                pull_request, review.user, review.body, review.html_url, data
            )
            return "pr_review [comment]"

        # TODO: confirm with product owners whether dismissed reviews should notify
        if review.state not in REVIEW_STATES:
            logger.info("github_review_state_ignored", state=review.state)
            return "pr_review [ignored]"

        action_msg, state_msg, color = REVIEW_STATES[review.state]
        reviewer = self._name(review.user.login, data)
        msg = f'{reviewer} {action_msg} PR "{make_link(pull_request.html_url, pull_request.title)}"'
        attachment = Attachment(
            body=review.body,
            title=f"Review: {state_msg}",
            title_link=review.html_url,
            color=color,
        )
        self.messenger.notify_participants(
            Notification(
                text=msg,
                attachments=(attachment,),
                item_owner=pull_request.user,
                sender=data.sender,
                repo=data.repository,
                participants=tuple(pull_request.assignees),
                branch=pull_request.target_branch,
                commits=(pull_request,),
            )
        )
        return "pr_review"

    def do_pull_request_comment(
        self,
        pull_request: PullRequest,
        commenter: User,
        comment_body: str,
        comment_url: str,
        data: HookBody,
    ) -> None:
        if not comment_body.strip():
            return

        msg = f'Comment on "{make_link(pull_request.html_url, pull_request.title)}"'
        attachment = Attachment(
            body=comment_body,
            title=f"{self._name(commenter.login, data)} said:",
            title_link=comment_url,
        )
        self.messenger.notify_participants(
            Notification(
                text=msg,
                attachments=(attachment,),
                item_owner=pull_request.user,
                sender=data.sender,
                repo=data.repository,
                participants=tuple(pull_request.assignees),
                branch=pull_request.target_branch,
                commits=(pull_request,),
            )
        )

    def handle_commit_comment(self, data: HookBody) -> str:
        comment = data.comment
        if (
            comment is None
            or not comment.commit_id
            or data.action != "created"
            or not _routable(data)
            or not comment.body.strip()
        ):
            return "commit_comment"

        commit = comment.commit_id[:7]
        commit_url = f"{data.repository.html_url}/commit/{comment.commit_id}"
        commit_path = comment.path or commit

        msg = f'Comment on "{commit_path}" ({make_link(commit_url, commit)})'
        attachment = Attachment(
            body=comment.body,
            title=f"{self._name(comment.user.login, data)} said:",
            title_link=comment.html_url,
        )
        self.messenger.notify_participants(
            Notification(
                text=msg,
                attachments=(attachment,),
                item_owner=comment.user,
                sender=data.sender,
                repo=data.repository,
                commits=(comment,),
            )
        )
        return "commit_comment"

    def handle_issue_comment(self, data: HookBody) -> str:
        issue = data.issue
        comment = data.comment
        if (
            issue is None
            or comment is None
            or data.action != "created"
            or not _routable(data)
            or not comment.body.strip()
        ):
            return "issue_comment"

        msg = f'Comment on "{make_link(issue.html_url, issue.title)}"'
        attachment = Attachment(
            body=comment.body,
            title=f"{self._name(comment.user.login, data)} said:",
            title_link=comment.html_url,
        )
        self.messenger.notify_participants(
            Notification(
                text=msg,
                attachments=(attachment,),
                item_owner=issue.user,
                sender=data.sender,
                repo=data.repository,
                participants=tuple(issue.assignees),
            )
        )
        return "issue_comment"

    def handle_push(self, data: HookBody) -> str:
        if not self.notify_on_push or not _routable(data) or data.deleted:
            return "push"

        branch = _branch_name(data.ref)
        if not branch or not data.commits:
            return "push"

        count = len(data.commits)
        plural = "" if count == 1 else "s"
        msg = (
            f"{self._name(data.sender.login, data)} pushed {count} commit{plural} "
            f"to branch {branch}"
        )
        attachments = tuple(
            Attachment(
                body=commit.message.splitlines()[0] if commit.message else "",
                title=commit.id[:7],
                title_link=commit.url,
            )
            for commit in data.commits[:MAX_PUSH_COMMITS]
        )
        self.messenger.resolve_channels(
            Notification(
                text=msg,
                attachments=attachments,
                item_owner=data.sender,
                sender=data.sender,
                repo=data.repository,
                branch=branch,
                commits=tuple(data.commits),
            )
        )
        return "push"


def _routable(data: HookBody) -> bool:
    """A notification needs both the repository and the acting user."""
    return data.repository is not None and data.sender is not None


def _branch_name(ref: Optional[str]) -> Optional[str]:
    if not ref or not ref.startswith(BRANCH_REF_PREFIX):
        return None
    return ref[len(BRANCH_REF_PREFIX) :]

import pytest

from infrastructure.notifications import AttachmentColor
from models.github import HookBody
from modules.github.handler import GithubEventKind, GithubWebhookHandler
from modules.github.messenger import Messenger
from tests.factories.github import (
    make_comment,
    make_directory,
    make_hook_body,
    make_issue,
    make_pull_request,
    make_review,
)


def _sent_notification(mock_messenger, method="notify_participants"):
    call = getattr(mock_messenger, method)
    call.assert_called_once()
    return call.call_args.args[0]


@pytest.mark.unit
class TestGithubEventKind:
    @pytest.mark.parametrize("kind", [k for k in GithubEventKind if k is not GithubEventKind.UNHANDLED])
    def test_parse_known_kinds(self, kind):
        assert GithubEventKind.parse(kind.value) is kind

    def test_parse_unknown_kind(self):
        assert GithubEventKind.parse("deployment_status") is GithubEventKind.UNHANDLED


@pytest.mark.unit
class TestDispatch:
    def test_unhandled_event_is_acknowledged(self, mock_handler, mock_messenger):
        response = mock_handler.dispatch("deployment_status", {"anything": 1})

        assert response.status_code == 200
        assert response.handled is False
        assert response.message == "Unhandled event: deployment_status"
        assert not mock_messenger.method_calls

    def test_ping(self, mock_handler, mock_messenger):
        response = mock_handler.dispatch("ping", {"zen": "Keep it simple."})

        assert response.handled is True
        assert response.message == "ping"
        assert not mock_messenger.method_calls

    def test_invalid_payload_is_acknowledged(self, mock_handler, mock_messenger):
        response = mock_handler.dispatch("issue_comment", {"sender": "not-an-object"})

        assert response.status_code == 200
        assert response.handled is True
        assert not mock_messenger.method_calls

    def test_accepts_validated_hook_body(self, mock_handler, mock_messenger):
        body = HookBody.model_validate(
            make_hook_body(issue=make_issue(), comment=make_comment())
        )

        response = mock_handler.dispatch("issue_comment", body)

        assert response.message == "issue_comment"
        mock_messenger.notify_participants.assert_called_once()

    def test_handler_exception_is_acknowledged(self, mock_handler, mock_messenger):
        mock_messenger.notify_participants.side_effect = RuntimeError("boom")

        response = mock_handler.dispatch(
            "issue_comment", make_hook_body(issue=make_issue(), comment=make_comment())
        )

        assert response.status_code == 200
        assert response.message == "issue_comment"

    def test_missing_sub_objects_are_acknowledged(self, mock_handler, mock_messenger):
        for kind in ("issue_comment", "commit_comment", "pull_request_review",
                     "pull_request_review_comment", "pull_request"):
            response = mock_handler.dispatch(kind, make_hook_body(action="created"))
            assert response.status_code == 200
        assert not mock_messenger.method_calls


@pytest.mark.unit
class TestIssueComment:
    def test_delivers_to_channel_and_owner(self, handler, worker):
        response = handler.dispatch(
            "issue_comment",
            make_hook_body(
                sender="bob",
                issue=make_issue(user="alice"),
                comment=make_comment(user="bob", body="LGTM"),
            ),
        )

        assert response.message == "issue_comment"
        assert worker.targets == ["channel:widgets-dev", "user:U_ALICE"]
        channel_request = worker.requests[0]
        assert channel_request.text == (
            'Comment on "<https://github.com/acme/widgets/issues/3|Widget is broken>"'
            " (<https://github.com/acme/widgets|acme/widgets>)"
        )
        assert channel_request.attachments[0].body == "LGTM"
        assert channel_request.attachments[0].title == "bob.jones said:"

    def test_dm_target_from_directory(self, worker):
        directory = make_directory(
            users={"github.com": {"alice": {"slack": "alice", "slack_id": "D1"}}},
        )
        handler = GithubWebhookHandler(
            Messenger(directory, worker, "octobot"), directory
        )

        handler.dispatch(
            "issue_comment",
            make_hook_body(
                sender="bob",
                issue=make_issue(user="alice"),
                comment=make_comment(user="bob", body="LGTM"),
            ),
        )

        channel_targets = [r for r in worker.requests if r.recipient.kind == "channel"]
        user_targets = [r.recipient.target for r in worker.requests if r.recipient.kind == "user"]
        assert len(channel_targets) == 1
        assert channel_targets[0].text.endswith("(<https://github.com/acme/widgets|acme/widgets>)")
        assert user_targets == ["D1"]

    def test_assignees_are_participants(self, mock_handler, mock_messenger):
        mock_handler.dispatch(
            "issue_comment",
            make_hook_body(
                issue=make_issue(user="alice", assignees=["carol"]),
                comment=make_comment(),
            ),
        )

        notification = _sent_notification(mock_messenger)
        assert notification.item_owner.login == "alice"
        assert [u.login for u in notification.participants] == ["carol"]

    @pytest.mark.parametrize("body", ["", "   \n\t", None])
    def test_blank_body_is_dropped(self, handler, worker, body):
        response = handler.dispatch(
            "issue_comment",
            make_hook_body(issue=make_issue(), comment=make_comment(body=body)),
        )

        assert response.message == "issue_comment"
        assert worker.requests == []

    def test_only_created_action_notifies(self, mock_handler, mock_messenger):
        mock_handler.dispatch(
            "issue_comment",
            make_hook_body(action="edited", issue=make_issue(), comment=make_comment()),
        )
        assert not mock_messenger.method_calls


@pytest.mark.unit
class TestPullRequestReviewComment:
    def test_comment_notification(self, mock_handler, mock_messenger):
        mock_handler.dispatch(
            "pull_request_review_comment",
            make_hook_body(
                pull_request=make_pull_request(user="alice", assignees=["carol"]),
                comment=make_comment(user="bob", html_url="https://github.com/c/1"),
            ),
        )

        notification = _sent_notification(mock_messenger)
        assert notification.text == (
            'Comment on "<https://github.com/acme/widgets/pull/7|Fix the widget>"'
        )
        assert notification.attachments[0].title == "bob.jones said:"
        assert notification.attachments[0].title_link == "https://github.com/c/1"
        assert notification.item_owner.login == "alice"
        assert [u.login for u in notification.participants] == ["carol"]
        assert notification.branch == "main"
        assert notification.commits[0].commit_reference() == "feature/widget"

    def test_blank_body_is_dropped(self, mock_handler, mock_messenger):
        mock_handler.dispatch(
            "pull_request_review_comment",
            make_hook_body(pull_request=make_pull_request(), comment=make_comment(body=" ")),
        )
        assert not mock_messenger.method_calls


@pytest.mark.unit
class TestPullRequestReview:
    def _dispatch(self, handler, state, body="Ship it"):
        return handler.dispatch(
            "pull_request_review",
            make_hook_body(
                action="submitted",
                sender="bob",
                pull_request=make_pull_request(user="alice"),
                review=make_review(user="bob", state=state, body=body),
            ),
        )

    def test_approved(self, mock_handler, mock_messenger):
        response = self._dispatch(mock_handler, "approved")

        assert response.message == "pr_review"
        notification = _sent_notification(mock_messenger)
        assert len(notification.attachments) == 1
        attachment = notification.attachments[0]
        assert attachment.color is AttachmentColor.GOOD
        assert attachment.title == "Review: Approved"
        assert notification.text == (
            'bob.jones approved PR "<https://github.com/acme/widgets/pull/7|Fix the widget>"'
        )

    def test_changes_requested(self, mock_handler, mock_messenger):
        self._dispatch(mock_handler, "changes_requested")

        notification = _sent_notification(mock_messenger)
        attachment = notification.attachments[0]
        assert attachment.color is AttachmentColor.DANGER
        assert attachment.title == "Review: Changes Requested"
        assert notification.text.startswith("bob.jones requested changes to PR ")

    def test_commented_uses_comment_path(self, mock_handler, mock_messenger):
        response = self._dispatch(mock_handler, "commented", body="nit: spacing")

        assert response.message == "pr_review [comment]"
        notification = _sent_notification(mock_messenger)
        assert notification.text.startswith('Comment on "')
        assert notification.attachments[0].title == "bob.jones said:"

    def test_state_match_is_exact(self, mock_handler, mock_messenger):
        response = self._dispatch(mock_handler, "APPROVED")

        assert response.message == "pr_review [ignored]"
        assert not mock_messenger.method_calls

    def test_dismissed_is_ignored(self, mock_handler, mock_messenger):
        response = self._dispatch(mock_handler, "dismissed")

        assert response.status_code == 200
        assert response.message == "pr_review [ignored]"
        assert not mock_messenger.method_calls

    def test_only_submitted_action_notifies(self, mock_handler, mock_messenger):
        mock_handler.dispatch(
            "pull_request_review",
            make_hook_body(
                action="edited",
                pull_request=make_pull_request(),
                review=make_review(),
            ),
        )
        assert not mock_messenger.method_calls

    def test_approval_reaches_owner_not_reviewer(self, handler, worker):
        self._dispatch(handler, "approved")

        colors = {a.color for r in worker.requests for a in r.attachments}
        assert colors == {AttachmentColor.GOOD}
        assert worker.targets == ["channel:widgets-dev", "user:U_ALICE"]


@pytest.mark.unit
class TestCommitComment:
    SHA = "0123456789abcdef0123456789abcdef01234567"

    def test_comment_on_file(self, mock_handler, mock_messenger):
        mock_handler.dispatch(
            "commit_comment",
            make_hook_body(
                comment=make_comment(user="bob", commit_id=self.SHA, path="src/widget.py"),
            ),
        )

        notification = _sent_notification(mock_messenger)
        assert notification.text == (
            'Comment on "src/widget.py" '
            f"(<https://github.com/acme/widgets/commit/{self.SHA}|0123456>)"
        )
        assert notification.item_owner.login == "bob"
        assert notification.participants == ()
        assert notification.commits[0].commit_reference() == self.SHA

    def test_comment_without_path_uses_short_sha(self, mock_handler, mock_messenger):
        mock_handler.dispatch(
            "commit_comment",
            make_hook_body(comment=make_comment(commit_id=self.SHA)),
        )

        notification = _sent_notification(mock_messenger)
        assert notification.text.startswith('Comment on "0123456" (')

    def test_comment_without_commit_is_ignored(self, mock_handler, mock_messenger):
        mock_handler.dispatch("commit_comment", make_hook_body(comment=make_comment()))
        assert not mock_messenger.method_calls


@pytest.mark.unit
class TestPullRequest:
    def _dispatch(self, handler, action, sender="bob", **pr_kwargs):
        return handler.dispatch(
            "pull_request",
            make_hook_body(
                action=action, sender=sender, pull_request=make_pull_request(**pr_kwargs)
            ),
        )

    def test_opened(self, mock_handler, mock_messenger):
        response = self._dispatch(
            mock_handler,
            "opened",
            sender="alice",
            user="alice",
            assignees=["carol"],
            requested_reviewers=["bob"],
        )

        assert response.message == "pr"
        notification = _sent_notification(mock_messenger)
        assert notification.text == "Pull Request opened by alice.smith"
        assert notification.attachments[0].title == "#7: Fix the widget"
        assert notification.attachments[0].body == "Makes the widget spin."
        assert [u.login for u in notification.participants] == ["carol", "bob"]

    def test_reopened(self, mock_handler, mock_messenger):
        self._dispatch(mock_handler, "reopened")
        assert _sent_notification(mock_messenger).text == "Pull Request reopened by bob.jones"

    def test_merged_notifies_owner_only(self, mock_handler, mock_messenger):
        self._dispatch(mock_handler, "closed", merged=True, assignees=["carol"])

        notification = _sent_notification(mock_messenger, "notify_owner_only")
        assert notification.text == "Pull Request merged by bob.jones"
        mock_messenger.notify_participants.assert_not_called()

    def test_closed_without_merge(self, mock_handler, mock_messenger):
        self._dispatch(mock_handler, "closed", merged=False)

        notification = _sent_notification(mock_messenger)
        assert notification.text == "Pull Request closed by bob.jones"

    def test_assigned(self, mock_handler, mock_messenger):
        self._dispatch(mock_handler, "assigned", assignees=["carol", "dave-x"])

        notification = _sent_notification(mock_messenger)
        assert notification.text == "Pull Request assigned to carol, dave.x"

    def test_review_requested(self, mock_handler, mock_messenger):
        self._dispatch(mock_handler, "review_requested", requested_reviewers=["bob"])

        notification = _sent_notification(mock_messenger)
        assert notification.text == "Review requested from bob.jones"
        assert [u.login for u in notification.participants] == ["bob"]

    def test_other_actions_are_acknowledged(self, mock_handler, mock_messenger):
        response = self._dispatch(mock_handler, "labeled")

        assert response.message == "pr"
        assert not mock_messenger.method_calls

    def test_null_body_renders_empty_attachment(self, mock_handler, mock_messenger):
        self._dispatch(mock_handler, "opened", body=None)

        assert _sent_notification(mock_messenger).attachments[0].body == ""


@pytest.mark.unit
class TestPush:
    def _push(self, ref="refs/heads/release/1.0", commits=None, deleted=False):
        if commits is None:
            commits = [
                {
                    "id": f"{i:040d}",
                    "message": f"Commit {i}\n\nDetails",
                    "url": f"https://github.com/acme/widgets/commit/{i}",
                }
                for i in range(7)
            ]
        return make_hook_body(action=None, ref=ref, commits=commits, deleted=deleted)

    def test_push_ignored_by_default(self, mock_handler, mock_messenger):
        response = mock_handler.dispatch("push", self._push())

        assert response.message == "push"
        assert not mock_messenger.method_calls

    def test_push_summary_when_enabled(self, mock_messenger, directory):
        handler = GithubWebhookHandler(mock_messenger, directory, notify_on_push=True)

        handler.dispatch("push", self._push())

        notification = _sent_notification(mock_messenger, "resolve_channels")
        assert notification.text == "bob.jones pushed 7 commits to branch release/1.0"
        assert len(notification.attachments) == 5
        assert notification.attachments[0].body == "Commit 0"
        assert notification.branch == "release/1.0"

    def test_deleted_branch_is_ignored(self, mock_messenger, directory):
        handler = GithubWebhookHandler(mock_messenger, directory, notify_on_push=True)

        handler.dispatch("push", self._push(deleted=True, commits=[]))

        assert not mock_messenger.method_calls

    def test_tag_push_is_ignored(self, mock_messenger, directory):
        handler = GithubWebhookHandler(mock_messenger, directory, notify_on_push=True)

        handler.dispatch("push", self._push(ref="refs/tags/v1.0"))

        assert not mock_messenger.method_calls

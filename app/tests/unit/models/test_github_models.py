import pytest

from models.github import CommitLike, HookBody, PullRequest, Repo
from tests.factories.github import (
    make_comment,
    make_hook_body,
    make_issue,
    make_pull_request,
    make_review,
)


@pytest.mark.unit
class TestHookBody:
    def test_unknown_fields_are_ignored(self):
        body = HookBody.model_validate(
            make_hook_body(installation={"id": 1}, issue=make_issue(), comment=make_comment())
        )

        assert body.action == "created"
        assert body.issue.user.login == "alice"
        assert body.comment.user.login == "bob"

    def test_sub_objects_are_optional(self):
        body = HookBody.model_validate({"zen": "Design for failure."})

        assert body.sender is None
        assert body.repository is None
        assert body.commits == []

    def test_null_bodies_become_empty(self):
        body = HookBody.model_validate(
            make_hook_body(
                pull_request=make_pull_request(body=None),
                comment=make_comment(body=None),
                review=make_review(body=None),
            )
        )

        assert body.pull_request.body == ""
        assert body.comment.body == ""
        assert body.review.body == ""

    def test_review_state_is_kept_verbatim(self):
        body = HookBody.model_validate(make_hook_body(review=make_review(state="APPROVED")))
        assert body.review.state == "APPROVED"

    def test_missing_review_state_is_empty(self):
        body = HookBody.model_validate(make_hook_body(review=make_review(state=None)))
        assert body.review.state == ""


@pytest.mark.unit
class TestRepo:
    def test_host_from_html_url(self):
        repo = Repo(html_url="https://git.example.com/acme/widgets", full_name="acme/widgets")
        assert repo.host == "git.example.com"


@pytest.mark.unit
class TestCommitLike:
    def test_pull_request_references_head_branch(self):
        pr = PullRequest.model_validate(make_pull_request(head="feature/x", base="main"))

        assert isinstance(pr, CommitLike)
        assert pr.commit_reference() == "feature/x"
        assert pr.target_branch == "main"

    def test_commit_comment_references_commit(self):
        body = HookBody.model_validate(make_hook_body(comment=make_comment(commit_id="abc123")))

        assert isinstance(body.comment, CommitLike)
        assert body.comment.commit_reference() == "abc123"

    def test_push_commit_references_id(self):
        body = HookBody.model_validate(
            make_hook_body(commits=[{"id": "deadbeef", "message": "Fix", "url": "u"}])
        )
        assert body.commits[0].commit_reference() == "deadbeef"

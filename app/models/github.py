"""GitHub webhook payload models.

Only the fields the bridge routes on are modelled; everything else in the
payload is ignored. Sub-objects are optional because each event kind carries a
different subset of them.
"""

from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


@runtime_checkable
class CommitLike(Protocol):
    """Anything exposing a commit id or branch reference for channel routing."""

    def commit_reference(self) -> str:
        """Commit SHA or branch ref (``refs/heads/...`` or a bare branch name)."""
        ...


class User(BaseModel):
    """A GitHub account. Two users are the same person iff logins match exactly."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    login: str


class Repo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    html_url: str
    full_name: str
    name: str = ""
    owner: Optional[User] = None

    @property
    def host(self) -> Optional[str]:
        """Host part of ``html_url`` (``github.com`` or an enterprise host)."""
        return urlparse(self.html_url).hostname


class BranchRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ref: str
    sha: str = ""


class PullRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    html_url: str
    title: str
    body: str = ""
    number: Optional[int] = None
    user: User
    assignees: List[User] = Field(default_factory=list)
    requested_reviewers: List[User] = Field(default_factory=list)
    merged: Optional[bool] = None
    head: Optional[BranchRef] = None
    base: Optional[BranchRef] = None

    @field_validator("body", mode="before")
    @classmethod
    def none_body_is_empty(cls, v):
        return v or ""

    def commit_reference(self) -> str:
        """Head branch of the pull request."""
        return self.head.ref if self.head else ""

    @property
    def target_branch(self) -> str:
        return self.base.ref if self.base else ""


class Issue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    html_url: str
    title: str
    number: Optional[int] = None
    user: User
    assignees: List[User] = Field(default_factory=list)


class Comment(BaseModel):
    """An issue, pull-request review, or commit comment."""

    model_config = ConfigDict(extra="ignore")

    body: str = ""
    html_url: str = ""
    user: User
    commit_id: Optional[str] = None
    path: Optional[str] = None

    @field_validator("body", mode="before")
    @classmethod
    def none_body_is_empty(cls, v):
        return v or ""

    def commit_reference(self) -> str:
        return self.commit_id or ""


class Review(BaseModel):
    model_config = ConfigDict(extra="ignore")

    body: str = ""
    html_url: str = ""
    state: str = ""
    user: User

    @field_validator("body", mode="before")
    @classmethod
    def none_body_is_empty(cls, v):
        return v or ""

    @field_validator("state", mode="before")
    @classmethod
    def none_state_is_empty(cls, v):
        return v or ""


class PushCommit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    message: str = ""
    url: str = ""

    def commit_reference(self) -> str:
        return self.id


class HookBody(BaseModel):
    """Top-level webhook body shared by every event kind."""

    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    sender: Optional[User] = None
    repository: Optional[Repo] = None
    pull_request: Optional[PullRequest] = None
    issue: Optional[Issue] = None
    comment: Optional[Comment] = None
    review: Optional[Review] = None
    assignee: Optional[User] = None
    requested_reviewer: Optional[User] = None
    ref: Optional[str] = None
    deleted: bool = False
    commits: List[PushCommit] = Field(default_factory=list)


class WebhookResponse(BaseModel):
    """Acknowledgement returned for every inbound event.

    ``handled`` is False only for event kinds the bridge does not know.
    """

    status_code: int = 200
    message: str
    handled: bool = True

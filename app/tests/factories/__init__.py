"""Test data factories for deterministic test data generation."""

from tests.factories.github import (
    RecordingWorker,
    make_comment,
    make_directory,
    make_hook_body,
    make_issue,
    make_pull_request,
    make_repo,
    make_review,
    make_user,
)

__all__ = [
    "RecordingWorker",
    "make_comment",
    "make_directory",
    "make_hook_body",
    "make_issue",
    "make_pull_request",
    "make_repo",
    "make_review",
    "make_user",
]

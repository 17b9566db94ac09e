"""Recipient directory backed by the users and repos configuration files.

users.json maps a source-control host to the Slack identity of each login:

    {"github.com": {"some-login": {"slack": "some.name", "slack_id": "U123"}}}

repos.json maps a host to channel routing rules:

    {"github.com": [
        {"repo": "org/service", "channel": "service-reviews"},
        {"repo": "org", "channel": "org-releases", "branches": ["release/*"]}
    ]}

Both files are loaded into an immutable DirectorySnapshot. Lookups read the
current snapshot; ``reload`` swaps in a new one, so concurrent lookups never
see a half-updated configuration.
"""

import fnmatch
import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from pydantic import BaseModel, TypeAdapter, ValidationError

from infrastructure.logging import get_module_logger
from integrations.slack.formatting import mention
from models.github import CommitLike, Repo

logger = get_module_logger()

BRANCH_REF_PREFIX = "refs/heads/"


class UserInfo(BaseModel):
    """Slack identity of one source-control login.

    Attributes:
        slack: Slack user name, used for display and as the DM fallback
        slack_id: Slack user id; preferred as the direct-message target
        mute_direct_messages: Never DM this user (channels still apply)
    """

    slack: str
    slack_id: Optional[str] = None
    mute_direct_messages: bool = False


class RepoRule(BaseModel):
    """Routes events of a repository (or a whole owner) to a channel.

    Attributes:
        repo: ``owner/name`` for one repository, or ``owner`` for all of them
        channel: Slack channel name
        branches: Optional glob patterns; empty means every branch
    """

    repo: str
    channel: str
    branches: List[str] = []

    def matches_repo(self, repo: Repo) -> bool:
        full_name = repo.full_name.lower()
        wanted = self.repo.lower()
        if "/" in wanted:
            return wanted == full_name
        return wanted == full_name.split("/", 1)[0]

    def matches_branch(self, candidates: Set[str]) -> bool:
        if not self.branches:
            return True
        return any(
            fnmatch.fnmatchcase(candidate, pattern)
            for candidate in candidates
            for pattern in self.branches
        )


_USERS_ADAPTER = TypeAdapter(Dict[str, Dict[str, UserInfo]])
_REPOS_ADAPTER = TypeAdapter(Dict[str, List[RepoRule]])


@dataclass(frozen=True)
class DirectorySnapshot:
    """Immutable view of the users and repos configuration."""

    users: Mapping[str, Mapping[str, UserInfo]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    repos: Mapping[str, Tuple[RepoRule, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_dict(
        cls,
        users: Optional[Dict[str, Any]] = None,
        repos: Optional[Dict[str, Any]] = None,
    ) -> "DirectorySnapshot":
        """Validate raw configuration documents and freeze them.

        Raises:
            pydantic.ValidationError: If either document is malformed
        """
        user_map = _USERS_ADAPTER.validate_python(users or {})
        repo_map = _REPOS_ADAPTER.validate_python(repos or {})
        return cls(
            users=MappingProxyType(
                {host: MappingProxyType(logins) for host, logins in user_map.items()}
            ),
            repos=MappingProxyType(
                {host: tuple(rules) for host, rules in repo_map.items()}
            ),
        )

    @classmethod
    def from_files(
        cls, users_path: Optional[str], repos_path: Optional[str]
    ) -> "DirectorySnapshot":
        """Load a snapshot from JSON files. Missing files count as empty.

        Raises:
            ValueError: If a file is not valid JSON
            pydantic.ValidationError: If a document does not match the schema
        """
        return cls.from_dict(_read_json(users_path), _read_json(repos_path))


def _read_json(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    file_path = Path(path)
    if not file_path.exists():
        logger.warning("directory_config_missing", path=str(file_path))
        return {}
    return json.loads(file_path.read_text(encoding="utf-8"))


class RecipientDirectory:
    """Read-only lookups of display names, DM targets and routed channels.

    Attributes:
        users_path: users.json location used by ``reload_from_files``
        repos_path: repos.json location used by ``reload_from_files``
    """

    def __init__(
        self,
        snapshot: Optional[DirectorySnapshot] = None,
        users_path: Optional[str] = None,
        repos_path: Optional[str] = None,
    ):
        self.users_path = users_path
        self.repos_path = repos_path
        self._snapshot = snapshot or DirectorySnapshot()

    @classmethod
    def from_files(cls, users_path: str, repos_path: str) -> "RecipientDirectory":
        snapshot = DirectorySnapshot.from_files(users_path, repos_path)
        logger.info(
            "directory_loaded",
            users_path=users_path,
            repos_path=repos_path,
            hosts=sorted(set(snapshot.users) | set(snapshot.repos)),
        )
        return cls(snapshot, users_path=users_path, repos_path=repos_path)

    @property
    def snapshot(self) -> DirectorySnapshot:
        return self._snapshot

    def reload(self, snapshot: DirectorySnapshot) -> None:
        """Replace the current configuration with a new snapshot."""
        self._snapshot = snapshot
        logger.info("directory_reloaded")

    def reload_from_files(self) -> bool:
        """Reload both files; keep the current snapshot if either is invalid.

        Returns:
            True if the new configuration was applied
        """
        try:
            snapshot = DirectorySnapshot.from_files(self.users_path, self.repos_path)
        except (OSError, ValueError, ValidationError) as e:
            logger.error(
                "directory_reload_failed",
                users_path=self.users_path,
                repos_path=self.repos_path,
                error=str(e),
            )
            return False
        self.reload(snapshot)
        return True

    def _user_info(self, login: str, repo_host: Optional[str]) -> Optional[UserInfo]:
        users = self._snapshot.users
        if repo_host is not None:
            return users.get(repo_host, {}).get(login)
        for logins in users.values():
            if login in logins:
                return logins[login]
        return None

    def display_name(self, login: str, repo_host: Optional[str]) -> str:
        """Slack name for a login on a host.

        Falls back to the login with every ``-`` replaced by ``.``: the Slack
        convention is dotted names, which GitHub logins cannot contain.
        """
        if repo_host is not None:
            info = self._user_info(login, repo_host)
            if info is not None:
                return info.slack
        return login.replace("-", ".")

    def direct_message_target(
        self, login: str, repo_host: Optional[str] = None
    ) -> Optional[str]:
        """Where to DM a login, or None if the user should not be messaged.

        Args:
            login: Source-control login
            repo_host: Restrict the lookup to this host. Without it the first
                host that knows the login is used.

        Returns:
            Slack user id if configured, else ``@<slack name>``; None when the
            login is unknown or has muted direct messages
        """
        info = self._user_info(login, repo_host)
        if info is None or info.mute_direct_messages:
            return None
        return info.slack_id or mention(info.slack)

    def lookup_channels(
        self, repo: Repo, branch: str, commits: Iterable[CommitLike]
    ) -> Set[str]:
        """Every channel whose rule matches the repository and branch.

        A rule with branch patterns matches when ``branch`` or any commit
        reference (``refs/heads/`` stripped) matches one of the patterns.
        """
        host = repo.host
        if host is None:
            return set()

        candidates = {branch} if branch else set()
        for commit in commits:
            reference = commit.commit_reference()
            if reference.startswith(BRANCH_REF_PREFIX):
                reference = reference[len(BRANCH_REF_PREFIX) :]
            if reference:
                candidates.add(reference)

        return {
            rule.channel
            for rule in self._snapshot.repos.get(host, ())
            if rule.matches_repo(repo) and rule.matches_branch(candidates)
        }

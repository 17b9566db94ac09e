"""GitHub integration settings."""

from infrastructure.configuration.base import IntegrationSettings


class GithubSettings(IntegrationSettings):
    """GitHub webhook routing configuration.

    Environment Variables:
        GITHUB_BOT_LOGIN: Login of the bridge's own service account. Never
            receives direct messages.
        GITHUB_USERS_CONFIG_PATH: JSON file mapping host -> login -> Slack user
        GITHUB_REPOS_CONFIG_PATH: JSON file mapping host -> channel routing rules
        NOTIFY_ON_PUSH: Post push summaries to matching channels
        GITHUB_DIRECTORY_RELOAD_MINUTES: Re-read both files this often; 0 disables

    Example:
        ```python
        from infrastructure.configuration import settings

        users_path = settings.github.GITHUB_USERS_CONFIG_PATH
        ```
    """

    GITHUB_BOT_LOGIN: str = "octobot"
    GITHUB_USERS_CONFIG_PATH: str = "config/users.json"
    GITHUB_REPOS_CONFIG_PATH: str = "config/repos.json"
    NOTIFY_ON_PUSH: bool = False
    GITHUB_DIRECTORY_RELOAD_MINUTES: int = 5

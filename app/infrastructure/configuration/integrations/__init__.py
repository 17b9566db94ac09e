"""Integration settings __init__ - exports all integration settings."""

from infrastructure.configuration.integrations.github import GithubSettings
from infrastructure.configuration.integrations.slack import SlackSettings

__all__ = [
    "GithubSettings",
    "SlackSettings",
]

"""
Factory functions for the GitHub webhook feature.

Application-scoped singletons wired from settings. Tests override them with
``app.dependency_overrides`` or call ``cache_clear()``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from infrastructure.services.providers import get_delivery_worker, get_settings
from modules.github.directory import RecipientDirectory
from modules.github.handler import GithubWebhookHandler
from modules.github.messenger import Messenger


@lru_cache
def get_directory() -> RecipientDirectory:
    """
    Get the recipient directory loaded from the users and repos files.

    Returns:
        RecipientDirectory: Cached directory; ``reload_from_files`` refreshes it.
    """
    settings = get_settings()
    return RecipientDirectory.from_files(
        settings.github.GITHUB_USERS_CONFIG_PATH,
        settings.github.GITHUB_REPOS_CONFIG_PATH,
    )


@lru_cache
def get_messenger() -> Messenger:
    settings = get_settings()
    return Messenger(
        directory=get_directory(),
        worker=get_delivery_worker(),
        bot_login=settings.github.GITHUB_BOT_LOGIN,
    )


@lru_cache
def get_github_handler() -> GithubWebhookHandler:
    """
    Get the webhook handler used by the ``/github`` route.

    Returns:
        GithubWebhookHandler: Cached handler sharing the directory and messenger.
    """
    settings = get_settings()
    return GithubWebhookHandler(
        messenger=get_messenger(),
        directory=get_directory(),
        notify_on_push=settings.github.NOTIFY_ON_PUSH,
    )


GithubHandlerDep = Annotated[GithubWebhookHandler, Depends(get_github_handler)]

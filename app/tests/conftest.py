import sys
from pathlib import Path
from unittest.mock import MagicMock

# Make application modules (e.g. `infrastructure.configuration`) importable
# however pytest is invoked.
project_root = str(Path(__file__).resolve().parents[1])
if project_root not in sys.path:
    sys.path.insert(0, project_root)

import pytest
from modules.github.handler import GithubWebhookHandler
from modules.github.messenger import Messenger
from tests.factories.github import RecordingWorker, make_directory


@pytest.fixture
def directory():
    """RecipientDirectory with the default github.com test configuration."""
    return make_directory()


@pytest.fixture
def worker():
    return RecordingWorker()


@pytest.fixture
def messenger(directory, worker):
    return Messenger(directory=directory, worker=worker, bot_login="octobot")


@pytest.fixture
def mock_messenger():
    """Messenger double for asserting which fan-out path a handler chose."""
    return MagicMock(spec=Messenger)


@pytest.fixture
def handler(messenger, directory):
    return GithubWebhookHandler(messenger=messenger, directory=directory)


@pytest.fixture
def mock_handler(mock_messenger, directory):
    return GithubWebhookHandler(messenger=mock_messenger, directory=directory)

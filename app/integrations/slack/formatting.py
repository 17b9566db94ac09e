"""Slack mrkdwn helpers."""


def make_link(url: str, text: str) -> str:
    """Render a clickable Slack link: ``<url|text>``."""
    return f"<{url}|{text}>"


def mention(username: str) -> str:
    """Render a Slack @-mention for a user name."""
    return "@" + username

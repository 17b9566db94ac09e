"""Slack Integration Package.

This package contains the Slack integration modules. Contains:

- client: Shared Slack WebClient used by the outbound chat client.
- formatting: mrkdwn helpers for links and mentions.
"""

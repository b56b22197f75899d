"""
Slack notifier for GitHub Actions workflow runs.

Reads commit and workflow metadata from the environment, renders a Slack
Block Kit message and posts it to a Slack Incoming Webhook. See
:mod:`slack_notify.cli` for the entry point and
:mod:`slack_notify.context` for the environment contract.
"""

__version__ = "1.0.0"

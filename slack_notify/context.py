"""
Input resolution for a single notification.

The notifier is configured entirely through environment variables. The
``SLACK_*`` values are supplied by the workflow author; the ``GITHUB_*``
values are exported by the Actions runner.

Required environment variables
------------------------------
- ``SLACK_WEBHOOK_URL``
    Incoming Slack Webhook URL the payload is posted to.

- ``SLACK_STATUS``
    Outcome of the run: ``success``, ``failure`` or ``cancelled``
    (case-insensitive).

Optional environment variables
------------------------------
- ``SLACK_AUTHOR`` (defaults to ``"unknown"``), ``SLACK_EMAIL``
- ``SLACK_COMMIT_ID``, ``SLACK_COMMIT_MSG``, ``SLACK_COMMIT_URL``
- ``SLACK_AVATAR_URL``, ``SLACK_COMPARE_URL``
- ``SLACK_CHANNEL``, ``SLACK_USERNAME``, ``SLACK_ICON_EMOJI``,
  ``SLACK_ICON_URL``, ``SLACK_THREAD_TS``
- ``GITHUB_EVENT_NAME``, ``GITHUB_REF``, ``GITHUB_REPOSITORY``,
  ``GITHUB_REPOSITORY_OWNER``, ``GITHUB_RUN_ID``, ``GITHUB_RUN_NUMBER``,
  ``GITHUB_WORKFLOW``
- ``GITHUB_SERVER_URL`` (defaults to ``"https://github.com"``)
"""

import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from slack_notify.errors import EXIT_CONFIG_ERROR, error

# GitHub Actions environment variables
ENV_GITHUB_EVENT_NAME = "GITHUB_EVENT_NAME"
ENV_GITHUB_REF = "GITHUB_REF"
ENV_GITHUB_REPO = "GITHUB_REPOSITORY"
ENV_GITHUB_REPO_OWNER = "GITHUB_REPOSITORY_OWNER"
ENV_GITHUB_RUN_ID = "GITHUB_RUN_ID"
ENV_GITHUB_RUN_NUMBER = "GITHUB_RUN_NUMBER"
ENV_GITHUB_SERVER_URL = "GITHUB_SERVER_URL"
ENV_GITHUB_WORKFLOW = "GITHUB_WORKFLOW"

# Slack environment variables
ENV_SLACK_AUTHOR = "SLACK_AUTHOR"
ENV_SLACK_AVATAR_URL = "SLACK_AVATAR_URL"
ENV_SLACK_CHANNEL = "SLACK_CHANNEL"
ENV_SLACK_COMMIT_ID = "SLACK_COMMIT_ID"
ENV_SLACK_COMMIT_MSG = "SLACK_COMMIT_MSG"
ENV_SLACK_COMMIT_URL = "SLACK_COMMIT_URL"
ENV_SLACK_COMPARE_URL = "SLACK_COMPARE_URL"
ENV_SLACK_EMAIL = "SLACK_EMAIL"
ENV_SLACK_ICON_EMOJI = "SLACK_ICON_EMOJI"
ENV_SLACK_ICON_URL = "SLACK_ICON_URL"
ENV_SLACK_STATUS = "SLACK_STATUS"
ENV_SLACK_THREAD_TS = "SLACK_THREAD_TS"
ENV_SLACK_USERNAME = "SLACK_USERNAME"
ENV_SLACK_WEBHOOK_URL = "SLACK_WEBHOOK_URL"

DEFAULT_AUTHOR = "unknown"
DEFAULT_SERVER_URL = "https://github.com"

# Slack attachment colour per run outcome
COLOR_SUCCESS = "#2eb886"
COLOR_FAILURE = "#951e13"
COLOR_CANCELLED = "#dddddd"

STATUS_COLORS: Mapping[str, str] = MappingProxyType(
    {
        "success": COLOR_SUCCESS,
        "failure": COLOR_FAILURE,
        "cancelled": COLOR_CANCELLED,
    }
)


@dataclass(frozen=True)
class NotificationContext:
    """Resolved values for one notification. Built once by :func:`resolve_context`."""

    webhook_url: str
    status: str
    author: str = DEFAULT_AUTHOR
    email: str = ""
    commit_id: str = ""
    commit_msg: str = ""
    commit_url: str = ""
    avatar_url: str = ""
    compare_url: str = ""
    event: str = ""
    ref: str = ""
    repo: str = ""
    owner: str = ""
    run_id: str = ""
    run_number: str = ""
    workflow: str = ""
    server_url: str = DEFAULT_SERVER_URL
    channel: str = ""
    username: str = ""
    icon_emoji: str = ""
    icon_url: str = ""
    thread_ts: str = ""

    @property
    def color(self) -> str:
        return STATUS_COLORS[self.status]


# --------------------------------------------------------------------------- #
# Environment helpers
# --------------------------------------------------------------------------- #


def clean_value(value: str) -> str:
    """
    Replace undecodable bytes with U+FFFD.

    On POSIX, :data:`os.environ` keeps bytes that are not valid UTF-8 as lone
    surrogates, which cannot be encoded back to UTF-8 for the payload.
    """
    return value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def must_env(environ: Mapping[str, str], key: str) -> str:
    """
    Return a required environment value, or halt with a configuration error.

    Args:
        environ:
            Mapping to read from (normally :data:`os.environ`).
        key:
            Name of the required variable.

    Returns:
        The non-empty value of ``key``.

    Raises:
        SystemExit:
            With ``EXIT_CONFIG_ERROR`` if the variable is absent or empty.
    """
    value = clean_value(environ.get(key, ""))
    if not value:
        error(f"Need to provide {key}", code=EXIT_CONFIG_ERROR)
    return value


def env_or(environ: Mapping[str, str], key: str, fallback: str = "") -> str:
    """Return ``environ[key]``, or ``fallback`` when it is absent or empty."""
    return clean_value(environ.get(key) or fallback)


# --------------------------------------------------------------------------- #
# Normalisation
# --------------------------------------------------------------------------- #


def normalise_status(raw: str) -> str:
    """
    Lowercase a status value and check it against the known outcomes.

    Raises:
        SystemExit:
            With ``EXIT_CONFIG_ERROR`` if the status is not one of
            ``success``, ``failure`` or ``cancelled``.
    """
    status = raw.lower()
    if status not in STATUS_COLORS:
        allowed = ", ".join(STATUS_COLORS)
        error(
            f"Invalid {ENV_SLACK_STATUS} {raw!r}; expected one of: {allowed}",
            code=EXIT_CONFIG_ERROR,
        )
    return status


def first_line(message: str) -> str:
    """
    Keep only the first line of a (possibly multi-line) commit message.

    A trailing carriage return left by CRLF line endings is also removed.
    """
    return message.split("\n", 1)[0].rstrip("\r")


def resolve_compare_url(compare_url: str, commit_url: str, repo: str, server_url: str) -> str:
    """
    Resolve the URL the ``Ref`` field links to.

    The first non-empty candidate wins:

      1. the explicit compare URL,
      2. the commit URL,
      3. the repository home page, ``{server_url}/{repo}``, when ``repo`` is set.

    Returns:
        The resolved URL, or an empty string if no candidate is available.
    """
    if compare_url:
        return compare_url
    if commit_url:
        return commit_url
    if repo:
        return f"{server_url}/{repo}"
    return ""


# --------------------------------------------------------------------------- #
# Resolver
# --------------------------------------------------------------------------- #


def resolve_context(environ: Optional[Mapping[str, str]] = None) -> NotificationContext:
    """
    Build a :class:`NotificationContext` from environment variables.

    Required values are checked first (webhook URL, then status), so a
    misconfigured run halts before anything else is read or sent.

    Args:
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.

    Returns:
        The fully resolved, validated context.

    Raises:
        SystemExit:
            With ``EXIT_CONFIG_ERROR`` on a missing required value or an
            unrecognised status.
    """
    if environ is None:
        environ = os.environ

    webhook_url = must_env(environ, ENV_SLACK_WEBHOOK_URL)
    status = normalise_status(must_env(environ, ENV_SLACK_STATUS))

    commit_url = env_or(environ, ENV_SLACK_COMMIT_URL)
    repo = env_or(environ, ENV_GITHUB_REPO)
    server_url = env_or(environ, ENV_GITHUB_SERVER_URL, DEFAULT_SERVER_URL).rstrip("/")

    return NotificationContext(
        webhook_url=webhook_url,
        status=status,
        author=env_or(environ, ENV_SLACK_AUTHOR, DEFAULT_AUTHOR),
        email=env_or(environ, ENV_SLACK_EMAIL),
        commit_id=env_or(environ, ENV_SLACK_COMMIT_ID),
        commit_msg=first_line(env_or(environ, ENV_SLACK_COMMIT_MSG)),
        commit_url=commit_url,
        avatar_url=env_or(environ, ENV_SLACK_AVATAR_URL),
        compare_url=resolve_compare_url(
            env_or(environ, ENV_SLACK_COMPARE_URL), commit_url, repo, server_url
        ),
        event=env_or(environ, ENV_GITHUB_EVENT_NAME),
        ref=env_or(environ, ENV_GITHUB_REF),
        repo=repo,
        owner=env_or(environ, ENV_GITHUB_REPO_OWNER),
        run_id=env_or(environ, ENV_GITHUB_RUN_ID),
        run_number=env_or(environ, ENV_GITHUB_RUN_NUMBER),
        workflow=env_or(environ, ENV_GITHUB_WORKFLOW),
        server_url=server_url,
        channel=env_or(environ, ENV_SLACK_CHANNEL),
        username=env_or(environ, ENV_SLACK_USERNAME),
        icon_emoji=env_or(environ, ENV_SLACK_ICON_EMOJI),
        icon_url=env_or(environ, ENV_SLACK_ICON_URL),
        thread_ts=env_or(environ, ENV_SLACK_THREAD_TS),
    )

"""Webhook delivery over :mod:`urllib.request`."""

import urllib.parse
import urllib.request
from http.client import HTTPException
from urllib.error import HTTPError, URLError

from slack_notify import __version__
from slack_notify.errors import EXIT_DELIVERY_ERROR, error

DEFAULT_TIMEOUT = 10.0
SUPPORTED_SCHEMES = ("http", "https")
USER_AGENT = f"slack-notify/{__version__}"


def _decode(body: bytes) -> str:
    return body.decode("utf-8", errors="replace").strip()


def _error_body(exc: HTTPError) -> str:
    if exc.fp is None:
        return ""
    try:
        return _decode(exc.read())
    except (HTTPException, OSError):
        return "<response body unreadable>"


def post_message(webhook_url: str, body: bytes, timeout: float = DEFAULT_TIMEOUT) -> str:
    """
    POST an encoded payload to a Slack Incoming Webhook.

    Args:
        webhook_url:
            Slack Incoming Webhook URL.
        body:
            JSON-encoded payload, see :func:`slack_notify.blocks.serialize_message`.
        timeout:
            Seconds to wait for the webhook to respond.

    Returns:
        The response body with surrounding whitespace removed (Slack answers
        ``"ok"``).

    Raises:
        SystemExit:
            With ``EXIT_DELIVERY_ERROR`` if the request cannot be completed or
            the webhook answers with a non-2xx status.
    """
    try:
        scheme = urllib.parse.urlsplit(webhook_url).scheme.lower()
    except ValueError as exc:
        error(f"Payload send failed: invalid webhook URL: {exc}", code=EXIT_DELIVERY_ERROR)
    if scheme not in SUPPORTED_SCHEMES:
        error(
            f"Payload send failed: unsupported URL scheme {scheme!r} in webhook URL",
            code=EXIT_DELIVERY_ERROR,
        )

    headers = {"Content-Type": "application/json", "User-Agent": USER_AGENT}

    try:
        req = urllib.request.Request(webhook_url, data=body, headers=headers, method="POST")
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            status = resp.getcode()
            reason = getattr(resp, "reason", "")
            resp_body = _decode(resp.read())
    except HTTPError as exc:
        resp_body = _error_body(exc)
        error(
            f"Payload send failed: HTTP {exc.code} {exc.reason}: {resp_body}",
            code=EXIT_DELIVERY_ERROR,
        )
    except URLError as exc:
        error(f"Payload send failed: {exc.reason}", code=EXIT_DELIVERY_ERROR)
    except ValueError as exc:
        # Raised for malformed hosts and ports, e.g. http.client.InvalidURL.
        error(f"Payload send failed: invalid webhook URL: {exc}", code=EXIT_DELIVERY_ERROR)
    except (HTTPException, OSError) as exc:
        error(f"Payload send failed: {exc!r}", code=EXIT_DELIVERY_ERROR)

    if not (200 <= status < 300):
        error(
            f"Payload send failed: HTTP {status} {reason}: {resp_body}",
            code=EXIT_DELIVERY_ERROR,
        )

    return resp_body

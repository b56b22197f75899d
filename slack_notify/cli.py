"""
Entry point for posting a workflow run notification to Slack.

Typical use inside a GitHub Actions step::

    - name: Notify Slack
      if: always()
      run: slack-notify
      env:
        SLACK_WEBHOOK_URL: ${{ secrets.SLACK_WEBHOOK_URL }}
        SLACK_STATUS: ${{ job.status }}
        SLACK_AUTHOR: ${{ github.event.head_commit.author.name }}
        SLACK_COMMIT_ID: ${{ github.sha }}
        SLACK_COMMIT_MSG: ${{ github.event.head_commit.message }}
        SLACK_COMMIT_URL: ${{ github.event.head_commit.url }}

Exit behaviour
--------------
- ``0``: the webhook accepted the message (its response body is printed to
  stdout).
- ``1``: missing or invalid configuration. Nothing is sent.
- ``2``: the webhook could not be reached or returned a non-2xx status.
"""

from typing import Mapping, Optional

from slack_notify.blocks import serialize_message
from slack_notify.context import resolve_context
from slack_notify.delivery import post_message
from slack_notify.payload import build_message


def main(environ: Optional[Mapping[str, str]] = None) -> None:
    """
    Resolve inputs, build the Slack message and deliver it.

    High-level workflow:

      1. Read and validate configuration from the environment.
      2. Build and serialise the Block Kit message.
      3. POST it to ``SLACK_WEBHOOK_URL`` and print the response body.

    Args:
        environ:
            Optional mapping used instead of :data:`os.environ`.

    Raises:
        SystemExit:
            On misconfiguration (code 1) or delivery failure (code 2).
    """
    ctx = resolve_context(environ)

    body = serialize_message(build_message(ctx))
    print(post_message(ctx.webhook_url, body))


if __name__ == "__main__":
    main()

"""
Slack message construction.

The layout is fixed:

  - a context line with the owner avatar and the bold repository name,
  - one attachment, coloured by run status, holding three sections:

        - ``*<run_link|Workflow #N>*``
        - fields: Ref, Author, Event, Status
        - the commit message line

Field renderers are small pure functions so each presence/absence case can
be checked on its own.
"""

from slack_notify.blocks import (
    Attachment,
    ContextBlock,
    ImageElement,
    Message,
    SectionBlock,
    TextObject,
)
from slack_notify.context import NotificationContext

SHORT_COMMIT_LENGTH = 8


def short_commit_id(commit_id: str) -> str:
    """Return the first 8 characters of a commit SHA (or the whole value if shorter)."""
    return commit_id[:SHORT_COMMIT_LENGTH]


def author_field(author: str, email: str) -> str:
    """
    Render the ``Author`` field.

    The author name becomes a ``mailto:`` link when an email address is
    available, otherwise it is shown as plain text.
    """
    if email:
        return f"*Author:*\n<mailto:{email}|{author}>"
    return f"*Author:*\n{author}"


def ref_field(ref: str, compare_url: str) -> str:
    """
    Render the ``Ref`` field.

    Whenever a compare URL is known the ref is wrapped in a link to it, even
    when the ref itself is empty.
    """
    if compare_url:
        return f"*Ref:*\n<{compare_url}|{ref}>"
    return f"*Ref:*\n{ref}"


def commit_line(commit_msg: str, commit_url: str, short_id: str) -> str:
    """
    Render the commit message line.

    Args:
        commit_msg:
            First line of the commit message.
        commit_url:
            Link to the commit, possibly empty.
        short_id:
            Output of :func:`short_commit_id`, possibly empty.

    Returns:
        ``"*Message:*\\n<url|msg (short)>"`` when both a URL and a short id
        are present, ``"*Message:*\\nmsg (short)"`` with only a short id, and
        ``"*Message:*\\nmsg"`` otherwise.
    """
    if commit_url and short_id:
        return f"*Message:*\n<{commit_url}|{commit_msg} ({short_id})>"
    if short_id:
        return f"*Message:*\n{commit_msg} ({short_id})"
    return f"*Message:*\n{commit_msg}"


def run_url(server_url: str, repo: str, run_id: str) -> str:
    return f"{server_url}/{repo}/actions/runs/{run_id}"


def fallback_text(repo: str, workflow: str, status: str) -> str:
    return f"GitHub Actions ({repo}): {workflow} {status}"


def build_message(ctx: NotificationContext) -> Message:
    """
    Assemble the complete webhook message for a resolved context.

    Args:
        ctx:
            Context produced by :func:`slack_notify.context.resolve_context`.
            Its status must already be validated.

    Returns:
        An immutable :class:`Message` ready for
        :func:`slack_notify.blocks.serialize_message`.
    """
    run_link = run_url(ctx.server_url, ctx.repo, ctx.run_id)
    short_id = short_commit_id(ctx.commit_id)

    header = ContextBlock(
        elements=(
            ImageElement(image_url=ctx.avatar_url, alt_text=ctx.owner),
            TextObject(text=f"*{ctx.repo}*"),
        )
    )

    title = SectionBlock(text=TextObject(text=f"*<{run_link}|{ctx.workflow} #{ctx.run_number}>*"))
    details = SectionBlock(
        fields=(
            TextObject(text=ref_field(ctx.ref, ctx.compare_url)),
            TextObject(text=author_field(ctx.author, ctx.email)),
            TextObject(text=f"*Event:*\n{ctx.event}"),
            TextObject(text=f"*Status:*\n{ctx.status}"),
        )
    )
    commit = SectionBlock(text=TextObject(text=commit_line(ctx.commit_msg, ctx.commit_url, short_id)))

    return Message(
        text=fallback_text(ctx.repo, ctx.workflow, ctx.status),
        blocks=(header,),
        attachments=(Attachment(blocks=(title, details, commit), color=ctx.color),),
        thread_ts=ctx.thread_ts,
        channel=ctx.channel,
        username=ctx.username,
        icon_emoji=ctx.icon_emoji,
        icon_url=ctx.icon_url,
    )

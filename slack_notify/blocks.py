"""
Slack Block Kit message model for Incoming Webhooks.

Only the shapes the notifier emits are modelled: context and section blocks,
image and text elements, attachments and the top-level message. Each type
renders itself with ``to_dict()``; optional values that are empty are left
out of the rendered dictionary.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

PLAIN_TEXT = "plain_text"
MRKDWN = "mrkdwn"

MAX_CONTEXT_ELEMENTS = 10
MAX_SECTION_FIELDS = 10
MAX_BLOCK_ID_LENGTH = 255


def _check_block_id(block_id: str) -> None:
    if len(block_id) > MAX_BLOCK_ID_LENGTH:
        raise ValueError(f"block_id exceeds {MAX_BLOCK_ID_LENGTH} characters")


@dataclass(frozen=True)
class TextObject:
    """Text composition object. ``emoji`` applies to ``plain_text``, ``verbatim`` to ``mrkdwn``."""

    text: str
    type: str = MRKDWN
    emoji: bool = False
    verbatim: bool = False

    def __post_init__(self) -> None:
        if self.type not in (PLAIN_TEXT, MRKDWN):
            raise ValueError(f"unsupported text type {self.type!r}")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "text": self.text}
        if self.emoji:
            data["emoji"] = True
        if self.verbatim:
            data["verbatim"] = True
        return data


@dataclass(frozen=True)
class ImageElement:
    image_url: str
    alt_text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "image", "image_url": self.image_url, "alt_text": self.alt_text}


Element = Union[ImageElement, TextObject]


@dataclass(frozen=True)
class ContextBlock:
    elements: Tuple[Element, ...]
    block_id: str = ""

    def __post_init__(self) -> None:
        if not self.elements:
            raise ValueError("context block needs at least one element")
        if len(self.elements) > MAX_CONTEXT_ELEMENTS:
            raise ValueError(f"context block allows at most {MAX_CONTEXT_ELEMENTS} elements")
        _check_block_id(self.block_id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": "context",
            "elements": [element.to_dict() for element in self.elements],
        }
        if self.block_id:
            data["block_id"] = self.block_id
        return data


@dataclass(frozen=True)
class SectionBlock:
    text: Optional[TextObject] = None
    fields: Tuple[TextObject, ...] = ()
    accessory: Optional[Element] = None
    block_id: str = ""

    def __post_init__(self) -> None:
        if self.text is None and not self.fields:
            raise ValueError("section block needs text or fields")
        if len(self.fields) > MAX_SECTION_FIELDS:
            raise ValueError(f"section block allows at most {MAX_SECTION_FIELDS} fields")
        _check_block_id(self.block_id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": "section"}
        if self.text is not None:
            data["text"] = self.text.to_dict()
        if self.block_id:
            data["block_id"] = self.block_id
        if self.fields:
            data["fields"] = [field.to_dict() for field in self.fields]
        if self.accessory is not None:
            data["accessory"] = self.accessory.to_dict()
        return data


Block = Union[ContextBlock, SectionBlock]


@dataclass(frozen=True)
class Attachment:
    """Legacy attachment used only to carry the status colour bar."""

    blocks: Tuple[Block, ...] = ()
    color: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.blocks:
            data["blocks"] = [block.to_dict() for block in self.blocks]
        if self.color:
            data["color"] = self.color
        return data


@dataclass(frozen=True)
class Message:
    """
    Incoming Webhook message.

    ``text`` is the notification fallback shown where blocks cannot be
    rendered. ``channel``, ``username``, ``icon_emoji`` and ``icon_url`` are
    only honoured by legacy webhooks but are harmless elsewhere.
    """

    text: str = ""
    blocks: Tuple[Block, ...] = ()
    attachments: Tuple[Attachment, ...] = ()
    thread_ts: str = ""
    mrkdwn: Optional[bool] = None
    channel: str = ""
    username: str = ""
    icon_emoji: str = ""
    icon_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.text:
            data["text"] = self.text
        if self.blocks:
            data["blocks"] = [block.to_dict() for block in self.blocks]
        if self.attachments:
            data["attachments"] = [attachment.to_dict() for attachment in self.attachments]
        if self.thread_ts:
            data["thread_ts"] = self.thread_ts
        if self.mrkdwn is not None:
            data["mrkdwn"] = self.mrkdwn
        for key in ("channel", "username", "icon_emoji", "icon_url"):
            value = getattr(self, key)
            if value:
                data[key] = value
        return data


def serialize_message(message: Message) -> bytes:
    """
    Encode a message as UTF-8 JSON for the webhook.

    ``json`` never HTML-escapes, so Slack link markup such as
    ``<https://example.com?a=1&b=2|label>`` is sent verbatim.
    """
    return json.dumps(message.to_dict(), ensure_ascii=False).encode("utf-8")

"""
Chat markup dialects.

Every dialect exposes the same rendering primitives so the description and
message building code never has to know which chat platform it targets:

- ``markdown``: one markdown string per message (Mattermost style)
- ``slackText``: one Slack mrkdwn string per message, with real mentions
- ``slack``: Slack Block Kit blocks
"""

import re
from abc import ABC, abstractmethod
from typing import Any

from reviewreminder.exceptions import ConfigurationError

_SLACK_UNSAFE = re.compile(r"[<>&|@#`]")
_MARKDOWN_UNSAFE = re.compile(r"[|@#`]")


def wrap_string(text: str, wrapper: str = "`") -> str:
    return f"{wrapper}{text}{wrapper}"


def sanitize_for_slack(text: str) -> str:
    """Remove characters that break Slack link syntax or trigger mentions."""
    return _SLACK_UNSAFE.sub("", text)


def sanitize_for_markdown(text: str) -> str:
    """Remove characters that break markdown link titles or trigger mentions."""
    return _MARKDOWN_UNSAFE.sub("", text)


class Markup(ABC):
    """Rendering primitives for one chat markup dialect."""

    type: str

    @abstractmethod
    def make_link(self, title: str, url: str) -> str: ...

    @abstractmethod
    def make_text(self, text: str, with_mentions: bool = True) -> Any:
        """Wrap text; ``with_mentions`` is only honored by dialects that can suppress linking."""

    @abstractmethod
    def make_bold(self, content: str) -> str: ...

    @abstractmethod
    def make_header(self, text: str) -> Any: ...

    @abstractmethod
    def mention(self, username: str, mapping: dict[str, str]) -> str: ...

    @abstractmethod
    def make_primary_info(self, info: Any) -> Any: ...

    @abstractmethod
    def make_additional_info(self, parts: list[Any]) -> Any: ...

    @abstractmethod
    def add_divider(self, body: Any) -> Any: ...

    @abstractmethod
    def flatten(self, parts: list[Any]) -> Any:
        """Collapse a message's parts into a string or a flat block list."""

    @abstractmethod
    def with_header(self, header: Any, body: Any) -> Any: ...

    @abstractmethod
    def compose_body(self, main: Any, secondary: Any) -> Any: ...

    @abstractmethod
    def compose_msg(self, body: Any) -> dict[str, Any]:
        """Build one deliverable message payload."""


class _TextMarkup(Markup):
    """Dialects that render every message as a single string."""

    def make_text(self, text: str, with_mentions: bool = True) -> str:
        return text

    def make_primary_info(self, info: str) -> str:
        return info

    def make_additional_info(self, parts: list[str]) -> str:
        return "\n".join(parts)

    def add_divider(self, body: str) -> str:
        return f"{body} \n"

    def flatten(self, parts: list[str]) -> str:
        return "\n".join(parts)

    def with_header(self, header: str, body: str) -> str:
        return f"{header}\n\n{body}"

    def compose_body(self, main: str, secondary: str) -> str:
        return "\n".join(part for part in (main, secondary) if part)

    def compose_msg(self, body: str) -> dict[str, Any]:
        return {"text": body}


class MarkdownMarkup(_TextMarkup):
    type = "markdown"

    def make_link(self, title: str, url: str) -> str:
        return f"[{sanitize_for_markdown(title)}]({url})"

    def make_bold(self, content: str) -> str:
        return f"**{content}**"

    def make_header(self, text: str) -> str:
        return f"#### {text}"

    def mention(self, username: str, mapping: dict[str, str]) -> str:
        # Mattermost resolves @username on its own
        return f"@{username}"


class SlackTextMarkup(_TextMarkup):
    type = "slackText"

    def make_link(self, title: str, url: str) -> str:
        return f"<{url}|{sanitize_for_slack(title)}>"

    def make_bold(self, content: str) -> str:
        return f"*{content}*"

    def make_header(self, text: str) -> str:
        return f"*{text}*"

    def mention(self, username: str, mapping: dict[str, str]) -> str:
        return _slack_mention(username, mapping)


class SlackMarkup(Markup):
    """Slack Block Kit: descriptions become section/context/divider blocks."""

    type = "slack"

    def make_link(self, title: str, url: str) -> str:
        return f"<{url}|{sanitize_for_slack(title)}>"

    def make_text(self, text: str, with_mentions: bool = True) -> dict[str, Any]:
        return {"type": "mrkdwn", "text": text, "verbatim": not with_mentions}

    def make_bold(self, content: str) -> str:
        return f"*{content}*"

    def make_header(self, text: str) -> dict[str, Any]:
        return {"type": "header", "text": {"type": "plain_text", "text": text}}

    def mention(self, username: str, mapping: dict[str, str]) -> str:
        return _slack_mention(username, mapping)

    def make_primary_info(self, info: dict[str, Any]) -> dict[str, Any]:
        return {"type": "section", "text": info}

    def make_additional_info(self, parts: list[dict[str, Any]]) -> dict[str, Any] | None:
        if not parts:
            return None
        return {"type": "context", "elements": parts}

    def add_divider(self, body: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [*body, {"type": "divider"}]

    def flatten(self, parts: list[Any]) -> list[dict[str, Any]]:
        blocks: list[dict[str, Any]] = []
        for part in parts:
            if isinstance(part, list):
                blocks.extend(part)
            else:
                blocks.append(part)
        return blocks

    def with_header(self, header: Any, body: Any) -> list[dict[str, Any]]:
        return [*_as_list(header), *_as_list(body)]

    def compose_body(self, main: Any, secondary: Any) -> list[dict[str, Any]]:
        return [part for part in (main, secondary) if part]

    def compose_msg(self, body: Any) -> dict[str, Any]:
        return {"blocks": _as_list(body)}


def _slack_mention(username: str, mapping: dict[str, str]) -> str:
    if mapping.get(username):
        return f"<@{mapping[username]}>"
    return f"@{username}"


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else [value]


MARKUPS: dict[str, type[Markup]] = {
    MarkdownMarkup.type: MarkdownMarkup,
    SlackTextMarkup.type: SlackTextMarkup,
    SlackMarkup.type: SlackMarkup,
}


def get_markup(name: str) -> Markup:
    """
    Get the markup dialect configured by ``messenger.markup``.

    Raises:
        ConfigurationError: If the dialect is unknown
    """
    try:
        return MARKUPS[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown markup {name!r}. Must be one of: {', '.join(MARKUPS)}"
        ) from None

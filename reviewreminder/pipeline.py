"""
Reminder run: aggregate, classify, render, chunk and send.
"""

import json
import math
import traceback
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeVar

from reviewreminder.aggregator import RequestAggregator
from reviewreminder.checks import RequestChecks
from reviewreminder.classifier import RequestClassifier, Section
from reviewreminder.config import Config
from reviewreminder.description import RequestDescriptionBuilder
from reviewreminder.emoji import EmojiSelector
from reviewreminder.exceptions import ConfigurationError, TransportError
from reviewreminder.logging import get_logger
from reviewreminder.markup import Markup, get_markup
from reviewreminder.mentions import MentionResolver
from reviewreminder.types.requests import MergeRequest

if TYPE_CHECKING:
    from reviewreminder.gitlab import AsyncGitLabClient
    from reviewreminder.messenger import WebhookMessenger

T = TypeVar("T")

logger = get_logger()

LIST_HEADER = "Hey, there are a couple of requests waiting for your review"
EMPTY_HEADER = "Hey, there is a couple of nothing"
EMPTY_BODY = "There are no pending requests! Let's do a new one!"


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """
    Split items into consecutive batches of at most ``size``.

    Raises:
        ConfigurationError: If size is not positive
    """
    if size < 1:
        raise ConfigurationError(f"Chunk size must be positive, got {size}")
    return [list(items[i * size:(i + 1) * size]) for i in range(math.ceil(len(items) / size))]


class MessagePipeline:
    """
    One reminder run.

    Example:
        ```python
        async with AsyncGitLabClient.from_config(config) as gitlab, \\
                WebhookMessenger.from_config(config) as messenger:
            status = await MessagePipeline(config, gitlab, messenger).perform()
        ```
    """

    def __init__(
        self,
        config: Config,
        gitlab: "AsyncGitLabClient",
        messenger: "WebhookMessenger",
    ) -> None:
        self.config = config
        self.gitlab = gitlab
        self.messenger = messenger

        settings = config.unapproved
        self.markup: Markup = get_markup(config.messenger.markup)
        self.checks = RequestChecks(settings)
        self.aggregator = RequestAggregator(gitlab, self.checks)
        self.classifier = RequestClassifier(self.checks)
        self.describer = RequestDescriptionBuilder(
            self.markup,
            settings,
            MentionResolver(
                settings.tag,
                self.markup,
                config.messenger.username_mapping(self.markup.type),
            ),
            EmojiSelector(settings.emoji),
        )

    async def perform(self) -> int:
        """
        Run and report failures.

        Returns:
            Process exit status: 0 on success, 1 on any error
        """
        try:
            await self.run()
        except TransportError as err:
            logger.error(str(err))
            return 1
        except Exception:
            traceback.print_exc()
            return 1
        return 0

    async def run(self) -> list[dict[str, Any]]:
        """Build every message and hand them to the messenger."""
        requests = await self.aggregator.aggregate(self.config.gitlab.projects)
        messages = self.build_messages(requests)

        logger.info("Sending messages")
        logger.info(json.dumps(messages, ensure_ascii=False))

        await self.messenger.send_many(messages)
        return messages

    def build_messages(self, requests: list[MergeRequest]) -> list[dict[str, Any]]:
        if not requests:
            return [self._empty_list_message()]

        markup = self.markup
        header = markup.make_header(LIST_HEADER)
        messages = []
        for idx, message in enumerate(self._request_messages(requests)):
            parts = markup.flatten(message)
            if idx == 0:
                parts = markup.with_header(header, parts)
            messages.append(markup.compose_msg(parts))
        return messages

    def _request_messages(self, requests: list[MergeRequest]) -> list[list[Any]]:
        split = self.config.unapproved.split_by_review_progress
        messages = []

        for section in self.classifier.classify(requests, split):
            for idx, batch in enumerate(self._section_chunks(section)):
                if split and idx == 0:
                    messages.append([self._section_title(section), *batch])
                else:
                    messages.append(batch)
        return messages

    def _section_chunks(self, section: Section) -> list[list[Any]]:
        markup = self.markup
        return [
            [markup.add_divider(self.describer.build(section.type, request)) for request in batch]
            for batch in chunk(section.requests, self.config.unapproved.requests_per_message)
        ]

    def _section_title(self, section: Section) -> Any:
        markup = self.markup
        return markup.make_primary_info(markup.make_text(markup.make_bold(section.title or "")))

    def _empty_list_message(self) -> dict[str, Any]:
        markup = self.markup
        header = markup.make_header(EMPTY_HEADER)
        body = markup.make_primary_info(markup.make_text(EMPTY_BODY))
        return markup.compose_msg(markup.with_header(header, body))

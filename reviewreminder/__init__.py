"""review-reminder - chat reminders for merge requests waiting for review."""

from reviewreminder.aggregator import RequestAggregator
from reviewreminder.checks import RequestChecks
from reviewreminder.classifier import RequestClassifier, Section
from reviewreminder.config import Config
from reviewreminder.description import RequestDescriptionBuilder
from reviewreminder.emoji import EmojiSelector, parse_interval
from reviewreminder.exceptions import ConfigurationError, ReminderError, TransportError
from reviewreminder.gitlab import AsyncGitLabClient
from reviewreminder.logging import configure_logging, get_logger
from reviewreminder.markup import MarkdownMarkup, Markup, SlackMarkup, SlackTextMarkup, get_markup
from reviewreminder.mentions import MentionResolver
from reviewreminder.messenger import DryRunMessenger, WebhookMessenger
from reviewreminder.pipeline import MessagePipeline, chunk
from reviewreminder.transport import AsyncHTTPTransport, RetryConfig

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Pipeline
    "MessagePipeline",
    "RequestAggregator",
    "RequestChecks",
    "RequestClassifier",
    "RequestDescriptionBuilder",
    "Section",
    "chunk",
    # Rendering
    "Markup",
    "MarkdownMarkup",
    "SlackTextMarkup",
    "SlackMarkup",
    "get_markup",
    "MentionResolver",
    "EmojiSelector",
    "parse_interval",
    # Collaborators
    "AsyncGitLabClient",
    "WebhookMessenger",
    "DryRunMessenger",
    "AsyncHTTPTransport",
    "RetryConfig",
    # Configuration
    "Config",
    # Exceptions
    "ReminderError",
    "ConfigurationError",
    "TransportError",
    # Logging
    "configure_logging",
    "get_logger",
]

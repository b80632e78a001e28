"""
Pytest plugin for review reminder testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["reviewreminder.testing.conftest"]
"""

# Re-export all fixtures for pytest auto-discovery
from reviewreminder.testing.fixtures import (
    base_config,
    mock_gitlab,
    mock_messenger,
    sample_request,
    under_review_request,
)

__all__ = [
    "base_config",
    "mock_gitlab",
    "mock_messenger",
    "sample_request",
    "under_review_request",
]

"""Review reminder testing utilities.

Provides mock collaborators and payload builders for testing reminder runs.
"""

from reviewreminder.testing.fixtures import (
    FIXED_NOW,
    create_merge_request,
    create_mock_approvals,
    create_mock_change,
    create_mock_discussion,
    create_mock_pipeline,
    create_mock_project,
    create_mock_request,
)
from reviewreminder.testing.mock import MockCall, MockGitLabClient, MockMessenger

__all__ = [
    # Mock collaborators
    "MockGitLabClient",
    "MockMessenger",
    "MockCall",
    # Helper functions
    "FIXED_NOW",
    "create_merge_request",
    "create_mock_approvals",
    "create_mock_change",
    "create_mock_discussion",
    "create_mock_pipeline",
    "create_mock_project",
    "create_mock_request",
]

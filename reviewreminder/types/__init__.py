"""Review reminder type definitions.

This module exports all data model types used by the reminder.
"""

from reviewreminder.types.requests import (
    Change,
    Discussion,
    MergeRequest,
    Note,
    Pipeline,
    Project,
    User,
)

__all__ = [
    "Change",
    "Discussion",
    "MergeRequest",
    "Note",
    "Pipeline",
    "Project",
    "User",
]

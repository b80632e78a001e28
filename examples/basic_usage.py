#!/usr/bin/env python3
"""
Basic review-reminder usage example.

Renders a reminder for a few in-memory merge requests in every markup
dialect, without talking to GitLab or a chat.
Run with: python examples/basic_usage.py
"""

import asyncio
import json
from datetime import timedelta

from reviewreminder import Config, MessagePipeline
from reviewreminder.testing import (
    FIXED_NOW,
    MockGitLabClient,
    MockMessenger,
    create_mock_approvals,
    create_mock_discussion,
    create_mock_pipeline,
    create_mock_project,
    create_mock_request,
)

print("=== review-reminder Basic Usage Example ===\n")

# 1. Register a project and its open merge requests
print("1. Registering merge requests...")
gitlab = MockGitLabClient()
gitlab.add_project(create_mock_project(id=1, name="backend"))
gitlab.add_request(
    1,
    create_mock_request(iid=1, title="Add login form", updated_at=FIXED_NOW - timedelta(days=3)),
    approvals=create_mock_approvals(2),
)
gitlab.add_request(
    1,
    create_mock_request(iid=2, title="Cache user lookups", author="erin"),
    approvals=create_mock_approvals(1, ["carol"]),
    discussions=[create_mock_discussion(("alice", True, False))],
)
gitlab.add_request(
    1,
    create_mock_request(iid=3, title="Bump dependencies"),
    approvals=create_mock_approvals(0),
    pipelines=[create_mock_pipeline("failed")],
)
print("   OK: 3 merge requests registered\n")

# 2. Render with each dialect
for number, markup in enumerate(["markdown", "slackText", "slack"], start=2):
    print(f"{number}. Rendering with markup={markup!r}...")
    config = Config.from_dict({
        "gitlab": {"token": "example", "projects": [1]},
        "messenger": {"markup": markup, "slack": {"usernameMapping": {"alice": "U024BE7LH"}}},
        "unapproved": {
            "splitByReviewProgress": True,
            "checkPipeline": True,
            "emoji": {"2 days": ":fire:", "default": ":hourglass:"},
            "tag": {"onThreadsOpen": True},
        },
    })
    messenger = MockMessenger()

    status = asyncio.run(MessagePipeline(config, gitlab, messenger).perform())
    assert status == 0, "Run should succeed"

    for message in messenger.sent:
        print(json.dumps(message, indent=2, ensure_ascii=False))
    print(f"\n   OK: {len(messenger.sent)} message(s) built\n")

print("=== Done ===")

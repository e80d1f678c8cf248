"""Messaging adapter registry — pluggable delivery of messages to reviewers."""

import os

_messenger_instance = None


def get_messenger():
    """Return the configured messaging adapter (singleton).

    Uses FakeMessenger by default. Select another adapter with the
    MESSAGING_ADAPTER environment variable.
    """
    global _messenger_instance
    if _messenger_instance is None:
        adapter = os.environ.get("MESSAGING_ADAPTER", "fake")
        if adapter == "fake":
            from moderation.messaging.fake_adapter import FakeMessenger

            _messenger_instance = FakeMessenger()
        else:
            raise ValueError(f"Unknown messaging adapter: {adapter}")
    return _messenger_instance


def reset_messenger():
    """Reset the messaging singleton (useful for testing)."""
    global _messenger_instance
    _messenger_instance = None

from __future__ import annotations


class PublishError(Exception):
    """Base class for errors raised while turning an issue into a bundle."""


class ConfigurationError(PublishError):
    """Required runtime input is missing; nothing is written."""


class NotApplicableEvent(PublishError):
    """The event is not something this site publishes; the run ends without output."""

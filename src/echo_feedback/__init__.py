"""Echo feedback collection and moderation service."""

__version__ = "0.1.0"

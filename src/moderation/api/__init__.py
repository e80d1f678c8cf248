"""Moderation API package."""

from moderation.api.routes import register_moderation_exception_handlers, review_router

__all__ = ["review_router", "register_moderation_exception_handlers"]

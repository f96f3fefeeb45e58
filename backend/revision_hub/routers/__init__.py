"""API routers."""

from revision_hub.routers import health, preferences, review

__all__ = ["health", "preferences", "review"]

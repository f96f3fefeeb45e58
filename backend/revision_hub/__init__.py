"""Revision Hub: spaced-repetition scheduling backend for bookmarked questions."""

__version__ = "0.1.0"

"""Shared utilities."""

from .polling import poll_until_done

__all__ = ["poll_until_done"]

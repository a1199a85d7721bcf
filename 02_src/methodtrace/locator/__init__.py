"""Source locator module."""

from .locator import UNKNOWN_LOCATION, FrameLocator, ISourceLocator

__all__ = ["UNKNOWN_LOCATION", "FrameLocator", "ISourceLocator"]

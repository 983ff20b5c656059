"""Image tools built on the hosted inference client."""

from .tools import ImageToolService

__all__ = ["ImageToolService"]

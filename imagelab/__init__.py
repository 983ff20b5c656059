"""Image Lab: hosted-model image tools behind a small HTTP API."""

__version__ = "0.1.0"

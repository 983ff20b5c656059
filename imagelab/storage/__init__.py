"""Filesystem storage for generated images and request-scoped temp files."""

from .uploads import UploadStorage, content_type_for, temporary_upload

__all__ = ["UploadStorage", "content_type_for", "temporary_upload"]

from __future__ import annotations

from typing import Any, Dict, Optional


class PhotometaError(Exception):
	"""Base exception for all photometa failures."""

	def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
		super().__init__(message)
		self.message = message
		self.details = details or {}

	def __str__(self) -> str:
		if self.details:
			return f"{self.message} | Details: {self.details}"
		return self.message


class MetadataError(PhotometaError):
	pass


class DecodeFailure(MetadataError):
	"""Raised when EXIF or XMP data cannot be decoded."""

	def __init__(self, fmt: str, reason: str) -> None:
		self.format = fmt
		self.reason = reason
		super().__init__(f"{fmt} decode failed: {reason}", {"format": fmt})


class NotAnImage(MetadataError):
	def __init__(self, content_type: Optional[str]) -> None:
		self.content_type = content_type
		super().__init__(f"not an image content type: {content_type!r}", {"content_type": content_type})


class NoXmpPresent(MetadataError):
	"""The buffer carries no XMP packet. Not a failure for the image."""

	def __init__(self) -> None:
		super().__init__("no XMP packet present")


class EmptyScanResult(PhotometaError):
	def __init__(self, table: str) -> None:
		self.table = table
		super().__init__("no records found", {"table": table})


class InvalidEvent(PhotometaError):
	pass


class StoreError(PhotometaError):
	pass


class ObjectStoreError(StoreError):
	pass


class AttributeStoreError(StoreError):
	pass

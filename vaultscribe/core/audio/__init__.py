"""Audio capture package."""

from .base import AudioCapture, CaptureError, CaptureInfo, PermissionDenied

__all__ = ["AudioCapture", "CaptureError", "CaptureInfo", "PermissionDenied"]

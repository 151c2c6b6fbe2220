"""Data models for Timewarden."""
from timewarden.models.settings import TimeSyncSettings

__all__ = ['TimeSyncSettings']

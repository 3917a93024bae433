"""Locate the native libc installation (headers and C runtime objects)."""

__version__ = "0.1.0"

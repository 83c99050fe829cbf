"""Shared pixel canvas: claim, quota and lock engine with its HTTP surface."""

__version__ = "0.1.0"

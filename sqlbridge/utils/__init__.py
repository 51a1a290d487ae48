"""Utility functions and classes for sqlbridge."""

from sqlbridge.utils import logging, type_guards

__all__ = ("logging", "type_guards")

"""Utility modules for the scheduling engine."""

from .logger import setup_logging

__all__ = ['setup_logging']

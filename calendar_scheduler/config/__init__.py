"""Configuration for the scheduling engine."""

from .settings import SchedulerSettings

__all__ = ['SchedulerSettings']

"""Entities and static tables used by the scheduling engine."""

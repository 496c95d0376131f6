"""Recurrence calculation and bounded task generation engine."""

"""Persistence of execution records."""

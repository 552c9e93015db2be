"""Synchronization engine core."""

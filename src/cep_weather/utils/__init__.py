"""Utility modules shared by both services."""

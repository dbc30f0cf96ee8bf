"""Utility helpers for the Emarsys API client."""

"""Utility helpers for TaskHub."""

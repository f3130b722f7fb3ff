"""Shared text and date helpers."""

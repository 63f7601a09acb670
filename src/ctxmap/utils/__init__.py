"""Formatting, pricing and path helpers."""

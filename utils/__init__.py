"""Utility helpers for Inkwell Review."""

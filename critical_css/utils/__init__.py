"""Utilities for critical-css."""

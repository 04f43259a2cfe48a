"""Tests for critical-css."""

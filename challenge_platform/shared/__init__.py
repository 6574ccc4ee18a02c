"""Shared helpers used across the challenge platform."""

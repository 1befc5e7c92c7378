"""Helpers for Todo Service."""

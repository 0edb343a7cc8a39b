"""Standalone helper tools."""

"""Shared utilities for packstate core modules."""

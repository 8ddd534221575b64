"""Executor integrations for explicit context hand-off."""

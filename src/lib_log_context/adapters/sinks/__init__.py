"""Reference sinks for finished log records."""

"""Package management commands."""

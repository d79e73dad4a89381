"""Runtime support for sessions: observability."""

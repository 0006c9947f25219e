"""Live channel plumbing: the process-scoped connection registry and the
room fan-out used by every state change."""

"""Policy hook — configuration, verdict state machine, and check dispatch."""

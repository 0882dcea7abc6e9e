"""healthgate — Postfix policy hook that defers mail while the host is unhealthy."""

__version__ = "0.1.0"

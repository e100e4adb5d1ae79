"""CaseBridge HTTP service."""

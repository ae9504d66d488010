"""OAuth client-credentials support."""

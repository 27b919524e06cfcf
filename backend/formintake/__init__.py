"""Form intake and review service."""

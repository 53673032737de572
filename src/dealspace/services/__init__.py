"""Request orchestration services."""

"""Challenge listing, participation state machine, service and HTTP router."""

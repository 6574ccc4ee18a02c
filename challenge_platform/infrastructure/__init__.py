"""Infrastructure package: database models and session management."""

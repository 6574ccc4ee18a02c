"""Challenge Platform.

Users browse challenges, participate, pause their participation and mark
challenges as completed. A paginated listing aggregates summary data.

Modules:
    - challenges: participation state machine, service and HTTP router
    - repositories: challenge aggregate persistence with conditional writes
    - infrastructure: database models and session management
    - shared: logging, schemas and time helpers
"""

from challenge_platform.main import APP_TITLE, APP_VERSION, app, create_app

__version__ = APP_VERSION
__all__ = ["app", "create_app", "APP_VERSION", "APP_TITLE"]

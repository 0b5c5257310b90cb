"""
Shared module for common utilities across the REST API and the WS gateway.

STRUCTURE:
- shared.security: Authentication and authorization
  - auth.py: JWT signing/verification, current_user_context, require_roles
  - password.py: Bcrypt hashing
  - rate_limit.py: slowapi limiter for the login endpoint

- shared.infrastructure: Database and messaging
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: Request id middleware and log filter
  - events/: Redis pub/sub change feed

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, statuses, routings

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Shared Pydantic schemas

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, current_user_context
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, OrderStatus
    from shared.utils.exceptions import NotFoundError, ForbiddenError
"""

"""
Shared module for common utilities of the REST API and CLI.

STRUCTURE:
- shared.infrastructure: Database and request correlation
  - db.py: SQLAlchemy engine, sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and logging filter

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, statuses, transitions, lifecycle actions

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Money, quantity and search validation
  - schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import CommandStatus, TableStatus
    from shared.utils.exceptions import NotFoundError, ForbiddenError
    from shared.utils.validators import parse_money
"""

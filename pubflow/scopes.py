"""
Scope strings checked by the permission gate.
"""

SYSTEM_ADMIN = "system:admin"

SITE_READ = "site:read"
SITE_UPDATE = "site:update"
SITE_SUBMISSIONS_LIST = "site:submissions:list"
SITE_SUBMISSIONS_READ = "site:submissions:read"
SITE_SUBMISSIONS_CREATE = "site:submissions:create"
SITE_SUBMISSIONS_UPDATE = "site:submissions:update"
SITE_SUBMISSIONS_DELETE = "site:submissions:delete"
SITE_SUBMISSIONS_VERSIONS_CREATE = "site:submissions:versions:create"
SITE_PUBLISHING = "site:submissions:publishing"

# Scopes every job-based transition in the built-in workflows requires
PUBLISHING_SCOPES = (SITE_SUBMISSIONS_UPDATE, SITE_PUBLISHING)

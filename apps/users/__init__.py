"""Users app package.

Accounts log in with their email address and carry one of two roles,
``user`` or ``admin``. Use ``apps.users.models.User`` (``users.User``) as the
AUTH_USER_MODEL throughout the project.
"""

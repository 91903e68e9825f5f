"""Authentication utilities.

Identity is owned by an external auth provider. The gateway in front of this
service verifies the provider's token and forwards the subject id in the
``X-User-Id`` header; requests without it run as the guest user so the app
stays usable in local development.
"""

from typing import Annotated

from fastapi import Header

DEFAULT_USER_ID = "guest"


def get_auth_user(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Get the current user id for HTTP requests.

    Args:
        x_user_id: Subject id forwarded by the auth gateway

    Returns:
        User ID (str)
    """
    if x_user_id and x_user_id.strip():
        return x_user_id.strip()
    return DEFAULT_USER_ID


"""Session snapshot consumed by the route guard."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    """Authenticated session as seen by navigation.

    Parameters
    ----------
    user_id : int
        The authenticated user's ID.
    is_admin : bool
        Whether admin-only routes are reachable.
    onboarding_complete : bool
        ``False`` while the company setup flow is still pending.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )

    user_id: int
    is_admin: bool = False
    onboarding_complete: bool = True

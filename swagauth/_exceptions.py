from typing import TYPE_CHECKING, Optional

from starlette.authentication import AuthenticationError

if TYPE_CHECKING:
    from ._policies import AuthzPolicy


class AuthenticationRequiredError(AuthenticationError):
    """Raised when an endpoint that requires an authenticated user is called anonymously."""


class PolicyAuthorizationError(AuthenticationError):
    """Raised when an authenticated request fails to pass its effective authorization policy."""

    def __init__(self, msg: str, policy: Optional["AuthzPolicy"] = None) -> None:
        """Creates a new exception.

        Args:
            msg (str): The exception message that describes the reason for policy failure.
            policy (AuthzPolicy, optional): The policy that rejected the request.
        """
        super().__init__(msg)
        self.policy = policy


class UnknownPolicyError(LookupError):
    """Raised when a declaration refers to a policy name that was never registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No authorization policy named {name!r} is registered")
        self.name = name

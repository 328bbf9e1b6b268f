import re
from typing import Optional, Union

from attr import field, frozen

_COMMA_WHITESPACE = re.compile(r"\s+,\s+|\s+,|,\s+")


def _normalize_policy_list(policies: str) -> str:
    return _COMMA_WHITESPACE.sub(",", policies)


@frozen
class AllowAnonymous:
    """Marks an endpoint as not requiring authentication."""


@frozen
class Authorize:
    """
    Marks an endpoint as requiring an authenticated user, optionally scoped to a named policy and/or role.

    Several `Authorize` declarations may apply to the same endpoint; every one of them must be satisfied.
    """

    policy: Optional[str] = None
    roles: Optional[str] = None


@frozen
class AuthorizeOnAnyOnePolicy:
    """
    Marks an endpoint as requiring an authenticated user who passes at least one policy from a comma delimited
    list of policy names.
    """

    policies: str = field(converter=_normalize_policy_list)

    @property
    def policy_names(self) -> list[str]:
        """
        Gets the policy names in declaration order.

        Returns:
            list[str]: The trimmed, non-empty policy names.
        """
        return [name.strip() for name in self.policies.split(",") if name.strip()]


AuthorizationDeclaration = Union[AllowAnonymous, Authorize, AuthorizeOnAnyOnePolicy]

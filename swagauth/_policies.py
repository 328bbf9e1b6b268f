from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from typing import Any, Awaitable, NamedTuple, Optional, cast

from fastapi.requests import Request
from starlette._utils import is_async_callable

from ._exceptions import UnknownPolicyError

PolicyCheckResult = NamedTuple(
    "PolicyCheckResult", [("allowed", bool), ("failure_reason", Optional[str])]
)


class AuthzPolicy(ABC):
    """Abstract base class for an authorization policy."""

    @abstractmethod
    def check(
        self, request: Request
    ) -> PolicyCheckResult | Awaitable[PolicyCheckResult]:
        """
        Performs the policy check. This can be a synchronous or asynchronous function.

        Args:
            request (Request): The current request, which the policy must authorize.

        Returns:
            PolicyCheckResult | Awaitable[PolicyCheckResult]: Whether the request is allowed, and why not.
        """
        raise NotImplementedError

    @property
    def description(self) -> str:
        """
        Gets a human-friendly description of the policy.

        Returns:
            str: The policy description.
        """
        return type(self).__name__


class Allow(AuthzPolicy):
    """An authorization policy that is satisfied by any request."""

    def check(self, request: Request) -> PolicyCheckResult:
        return PolicyCheckResult(True, None)


class Authenticated(AuthzPolicy):
    """An authorization policy that requires an authenticated user."""

    def check(self, request: Request) -> PolicyCheckResult:
        if "user" not in request.scope or not request.user.is_authenticated:
            return PolicyCheckResult(False, "User not authenticated")
        return PolicyCheckResult(True, None)


def _user_claims(request: Request) -> Mapping[str, Any]:
    if "user" not in request.scope:
        return {}
    return getattr(request.user, "claims", {}) or {}


class HasClaim(AuthzPolicy):
    """
    An authorization policy that requires the user to carry a claim with the given value. A claim holding a list is
    satisfied if any of its items equals the value.
    """

    def __init__(self, claim: str, value: Any) -> None:
        super().__init__()
        self.claim = claim
        self.value = value

    def check(self, request: Request) -> PolicyCheckResult:
        claim_value = _user_claims(request).get(self.claim)
        values = claim_value if isinstance(claim_value, (list, tuple, set)) else [claim_value]
        if self.value in values:
            return PolicyCheckResult(True, None)
        return PolicyCheckResult(False, f"Claim {self.claim} does not include {self.value}")

    @property
    def description(self) -> str:
        return f"{type(self).__name__}({self.claim}={self.value})"


class InRole(HasClaim):
    """An authorization policy that requires the user to be in a role, read from the `roles` claim."""

    def __init__(self, role: str) -> None:
        super().__init__("roles", role)


class AllOf(AuthzPolicy):
    """
    A policy that aggregates one or more sub-policies. All of the sub-policies must pass for the composite policy to
    pass.

    Args:
        AuthzPolicy (_type_): One or more sub-policies to compose into a single policy.
    """

    def __init__(self, *args: AuthzPolicy) -> None:
        super().__init__()
        self.policies = [*args]

    async def check(self, request: Request) -> PolicyCheckResult:
        for policy in self.policies:
            result = await do_policy_check(request, policy)
            if not result.allowed:
                return PolicyCheckResult(
                    False,
                    f"Policy authorization rejected by sub-policy {policy.description}",
                )
        return PolicyCheckResult(True, None)


class OneOf(AuthzPolicy):
    """
    A policy that aggregates one or more sub-policies. At least one sub-policy must pass for the composite policy to
    pass.

    Args:
        AuthzPolicy (_type_): One or more sub-policies to compose into a single policy.
    """

    def __init__(self, *args: AuthzPolicy) -> None:
        super().__init__()
        self.policies = [*args]

    async def check(self, request: Request) -> PolicyCheckResult:
        for policy in self.policies:
            result = await do_policy_check(request, policy)
            if result.allowed:
                return PolicyCheckResult(True, None)
        return PolicyCheckResult(False, "Not authorized by any sub-policy")


class PolicyRegistry(Mapping[str, AuthzPolicy]):
    """The named policies that `Authorize` and `AuthorizeOnAnyOnePolicy` declarations refer to."""

    def __init__(self, policies: Optional[Mapping[str, AuthzPolicy]] = None) -> None:
        self._policies: dict[str, AuthzPolicy] = dict(policies or {})

    def add_policy(self, name: str, policy: AuthzPolicy) -> None:
        self._policies[name] = policy

    def get_policy(self, name: str) -> AuthzPolicy:
        """
        Gets a policy by name.

        Raises:
            UnknownPolicyError: No policy is registered under the name.
        """
        try:
            return self._policies[name]
        except KeyError:
            raise UnknownPolicyError(name) from None

    def __getitem__(self, name: str) -> AuthzPolicy:
        return self._policies[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)


async def do_policy_check(request: Request, policy: AuthzPolicy) -> PolicyCheckResult:
    if is_async_callable(policy.check):
        result = await cast(Awaitable[PolicyCheckResult], policy.check(request))
    else:
        result = cast(PolicyCheckResult, policy.check(request))
    return result

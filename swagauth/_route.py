import logging
from collections.abc import Callable, Coroutine
from typing import Any

from fastapi.requests import Request
from fastapi.responses import Response
from fastapi.routing import APIRoute

from ._declarations import AllowAnonymous, Authorize, AuthorizeOnAnyOnePolicy
from ._decorators import get_controller_and_action_declarations
from ._exceptions import AuthenticationRequiredError, PolicyAuthorizationError
from ._policies import (
    Allow,
    Authenticated,
    AuthzPolicy,
    InRole,
    OneOf,
    PolicyRegistry,
    do_policy_check,
)

# Attributes of `app.state` holding the security configuration of an application
POLICIES_STATE_KEY = "authz_policies"
DEFAULT_POLICY_STATE_KEY = "authz_default_policy"

logger = logging.getLogger(__name__)


class SecureRoute(APIRoute):
    """A custom `APIRoute` that enforces the authorization declarations of its endpoint and controller."""

    default_policy: AuthzPolicy = Allow()
    """
    The default policy to apply if neither the endpoint nor its controller declares any authorization, unless the
    application sets its own with `add_endpoint_security`.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        """
        Gets the handler function for the current route.

        Returns:
            Callable[[Request], Coroutine[Any, Any, Response]]: The route handler function.
        """

        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            """
            The route handler that implements declaration checking.

            Args:
                request (Request): The request to authorize.

            Raises:
                AuthenticationRequiredError: The endpoint requires an authenticated user and there is none.
                PolicyAuthorizationError: An authorization requirement was not satisfied.

            Returns:
                Response: The response from the underlying endpoint's handler function, if the request was authorized.
            """

            await self._invoke_policy_check(request)
            return await original_route_handler(request)

        return custom_route_handler

    async def _invoke_policy_check(self, request: Request):
        endpoint = self.dependant.call
        state = request.app.state
        default_policy: AuthzPolicy = getattr(state, DEFAULT_POLICY_STATE_KEY, self.default_policy)
        policies: PolicyRegistry = getattr(state, POLICIES_STATE_KEY, None) or PolicyRegistry()

        if get_controller_and_action_declarations(endpoint, AllowAnonymous):
            return

        required = get_controller_and_action_declarations(endpoint, Authorize)
        any_one = get_controller_and_action_declarations(endpoint, AuthorizeOnAnyOnePolicy)
        if not required and not any_one:
            await self._check(request, default_policy)
            return

        await self._check(request, Authenticated())
        for declaration in required:
            if declaration.policy:
                await self._check(request, policies.get_policy(declaration.policy))
            if declaration.roles:
                roles = [role.strip() for role in declaration.roles.split(",") if role.strip()]
                await self._check(request, OneOf(*(InRole(role) for role in roles)))

        if any_one:
            # Only the first any-one-of declaration is honored
            names = any_one[0].policy_names
            for name in names:
                result = await do_policy_check(request, policies.get_policy(name))
                if result.allowed:
                    logger.debug("%s authorized by policy %s", self.path, name)
                    return
            raise PolicyAuthorizationError(f"Not authorized by any one of the policies {', '.join(names)}")

    async def _check(self, request: Request, policy: AuthzPolicy):
        result = await do_policy_check(request, policy)
        if result.allowed:
            return
        reason = result.failure_reason if result.failure_reason else "Not authorized by policy"
        logger.debug("%s rejected by %s: %s", self.path, policy.description, reason)
        if "user" not in request.scope or not request.user.is_authenticated:
            raise AuthenticationRequiredError(reason)
        raise PolicyAuthorizationError(reason, policy)

"""
This package documents and enforces declarative authorization for a FastAPI application.

Endpoints are grouped into `Controller` routers and decorated with `allow_anonymous`, `authorize` or
`authorize_on_any_one_policy`. The same declarations drive both the runtime checks made by `SecureRoute` and the
text and security requirements written into the generated OpenAPI document.
"""

import logging
from collections.abc import Mapping
from typing import Optional

from fastapi.applications import FastAPI
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from starlette.authentication import AuthenticationBackend, AuthenticationError
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.requests import HTTPConnection

from ._annotator import (
    AddSecurityRequirement,
    AppendAuthorizationToDescription,
    OperationFilter,
    add_security_requirement,
    annotate,
    any_one_policy_policies,
    append_authorization_to_description,
    authorize_policies,
    authorize_roles,
)
from ._context import ApiDescription, OperationFilterContext
from ._controller import Controller
from ._declarations import (
    AllowAnonymous,
    AuthorizationDeclaration,
    Authorize,
    AuthorizeOnAnyOnePolicy,
)
from ._decorators import (
    allow_anonymous,
    authorize,
    authorize_on_any_one_policy,
    get_controller,
    get_controller_and_action_declarations,
    get_declarations,
)
from ._exceptions import (
    AuthenticationRequiredError,
    PolicyAuthorizationError,
    UnknownPolicyError,
)
from ._openapi import build_openapi, configure_openapi
from ._ordering import (
    METHODS_ORDER,
    SwaggerControllerOrder,
    order_by_controller,
    order_by_controller_then_method,
    order_by_controller_then_path,
)
from ._policies import (
    AllOf,
    Allow,
    Authenticated,
    AuthzPolicy,
    HasClaim,
    InRole,
    OneOf,
    PolicyCheckResult,
    PolicyRegistry,
)
from ._route import DEFAULT_POLICY_STATE_KEY, POLICIES_STATE_KEY, SecureRoute

logger = logging.getLogger(__name__)


def _unauthorized(conn: HTTPConnection, exc: Exception) -> JSONResponse:
    return JSONResponse({"detail": str(exc) or "Unauthorized"}, status_code=401, headers={"WWW-Authenticate": "Bearer"})


async def _authentication_required(request: Request, exc: Exception) -> JSONResponse:
    return _unauthorized(request, exc)


async def _policy_authorization_failed(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"detail": str(exc) or "Forbidden"}, status_code=403)


def _authentication_failed(conn: HTTPConnection, exc: AuthenticationError) -> JSONResponse:
    logger.debug("Authentication failed: %s", exc)
    return _unauthorized(conn, exc)


def add_endpoint_security(
    app: FastAPI,
    *,
    backend: AuthenticationBackend,
    policies: Optional[Mapping[str, AuthzPolicy]] = None,
    default_policy: AuthzPolicy = Allow()
) -> None:
    """
    Adds declarative security middleware.

    After an app is configured with this function, endpoints can be assigned authorization requirements by using the
    `@authorize`, `@authorize_on_any_one_policy` and `@allow_anonymous` decorators, or by adding them to a
    `Controller`. The decorators work with both sync and async endpoint functions.

    Example:
        The example below requires the `Administrator` policy in order to access the endpoint::

            from fastapi import FastAPI
            from swagauth import AllOf, Authenticated, HasClaim, add_endpoint_security, authorize

            app = FastAPI()
            add_endpoint_security(
                app,
                backend=JwtAuthBackend(settings),
                policies={"Administrator": AllOf(Authenticated(), HasClaim("groups", "Administrator"))},
            )


            @app.get("/")
            @authorize(policy="Administrator")
            async def root():
                return {"message": "Hello World"}

    Args:
        app (FastAPI):
            The application to configure with declarative security.

        backend (AuthenticationBackend):
            The authentication backend to use with the authentication middleware.

        policies (Mapping[str, AuthzPolicy], optional):
            The named policies that declarations refer to. They are kept on `app.state`, so each application has its
            own.

        default_policy (AuthzPolicy, optional):
            The default policy to use if an endpoint has no declaration at all. Defaults to allowing access to the
            endpoint.
    """
    app.add_middleware(AuthenticationMiddleware, backend=backend, on_error=_authentication_failed)
    app.add_exception_handler(AuthenticationRequiredError, _authentication_required)
    app.add_exception_handler(PolicyAuthorizationError, _policy_authorization_failed)
    app.router.route_class = SecureRoute
    registry = PolicyRegistry(policies)
    setattr(app.state, POLICIES_STATE_KEY, registry)
    setattr(app.state, DEFAULT_POLICY_STATE_KEY, default_policy)
    logger.info("Endpoint security enabled with policies: %s", ", ".join(registry) or "none")


__all__ = [
    "add_endpoint_security",
    "configure_openapi",
    "build_openapi",
    "Controller",
    "SecureRoute",
    "ApiDescription",
    "OperationFilterContext",
    "OperationFilter",
    "AllowAnonymous",
    "Authorize",
    "AuthorizeOnAnyOnePolicy",
    "AuthorizationDeclaration",
    "allow_anonymous",
    "authorize",
    "authorize_on_any_one_policy",
    "get_controller",
    "get_declarations",
    "get_controller_and_action_declarations",
    "annotate",
    "append_authorization_to_description",
    "add_security_requirement",
    "authorize_policies",
    "authorize_roles",
    "any_one_policy_policies",
    "AppendAuthorizationToDescription",
    "AddSecurityRequirement",
    "SwaggerControllerOrder",
    "METHODS_ORDER",
    "order_by_controller",
    "order_by_controller_then_path",
    "order_by_controller_then_method",
    "PolicyCheckResult",
    "PolicyRegistry",
    "AuthzPolicy",
    "Allow",
    "Authenticated",
    "HasClaim",
    "InRole",
    "AllOf",
    "OneOf",
    "AuthenticationRequiredError",
    "PolicyAuthorizationError",
    "UnknownPolicyError",
]

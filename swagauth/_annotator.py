"""
Appends authentication/authorization requirements to OpenAPI operations.

The functions in this module work on a single operation object of an OpenAPI document, i.e. the `dict` found at
`paths[path][method]`. They read nothing but the declarations they are given, so they can be driven by the operation
filters below or called directly.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

from ._context import OperationFilterContext
from ._declarations import AllowAnonymous, Authorize, AuthorizeOnAnyOnePolicy

ANONYMOUS_DESCRIPTION = "\r\n\r\nAuthentication/authorization is not required."
AUTHENTICATION_ONLY_DESCRIPTION = "\r\n\r\nAuthentication, but no authorization is required."
DEFAULT_SECURITY_SCHEME = "Bearer"

Operation = dict[str, Any]

logger = logging.getLogger(__name__)


class OperationFilter(Protocol):
    """Enables us to type the operation filters."""

    def __call__(self, operation: Operation, context: OperationFilterContext) -> None:
        pass


def authorize_policies(declarations: Iterable[Authorize]) -> list[str]:
    """Returns the non-empty policies of `Authorize` declarations, sorted."""
    return sorted(d.policy for d in declarations if d.policy)


def authorize_roles(declarations: Iterable[Authorize]) -> list[str]:
    """Returns the non-empty roles of `Authorize` declarations, sorted."""
    return sorted(d.roles for d in declarations if d.roles)


def any_one_policy_policies(declarations: Sequence[AuthorizeOnAnyOnePolicy]) -> list[str]:
    """Returns the policies of the first `AuthorizeOnAnyOnePolicy` declaration, sorted. Later declarations are ignored."""
    if not declarations:
        return []
    return sorted(declarations[0].policy_names)


def _append_description(operation: Operation, text: str) -> None:
    operation["description"] = (operation.get("description") or "") + text


def _requirement_text(qualifier: str, singular: str, plural: str, names: Sequence[str]) -> str:
    many = len(names) > 1
    return (
        f"\r\n\r\nAuthorization requires {qualifier if many else ''}the following {plural if many else singular}: "
        f"<b>{'</b>, <b>'.join(names)}</b>"
    )


def append_authorization_to_description(
    operation: Operation,
    anonymous_present: bool,
    required_declarations: Sequence[Authorize],
    any_one_policy_declarations: Sequence[AuthorizeOnAnyOnePolicy],
    exclude_anonymous_text: bool = False,
) -> Operation:
    """
    Appends a human-readable summary of the authentication/authorization requirements to the operation description.

    Args:
        operation (Operation): The OpenAPI operation to update.
        anonymous_present (bool): Whether the handler allows anonymous access.
        required_declarations (Sequence[Authorize]): The `Authorize` declarations of the handler.
        any_one_policy_declarations (Sequence[AuthorizeOnAnyOnePolicy]): The any-one-of declarations of the handler.
        exclude_anonymous_text (bool, optional): Skip the text for anonymous handlers. Defaults to False.

    Returns:
        Operation: The updated operation.
    """
    if anonymous_present:
        if not exclude_anonymous_text:
            _append_description(operation, ANONYMOUS_DESCRIPTION)
        return operation

    policies = authorize_policies(required_declarations)
    roles = authorize_roles(required_declarations)
    any_one_policies = any_one_policy_policies(any_one_policy_declarations)

    if policies:
        _append_description(operation, _requirement_text("each of ", "policy", "policies", policies))
    if roles:
        _append_description(operation, _requirement_text("any one of ", "role", "roles", roles))
    if any_one_policies:
        _append_description(operation, _requirement_text("any one of ", "policy", "policies", any_one_policies))

    if (required_declarations or any_one_policy_declarations) and not (policies or roles or any_one_policies):
        _append_description(operation, AUTHENTICATION_ONLY_DESCRIPTION)
    return operation


def add_security_requirement(
    operation: Operation,
    anonymous_present: bool,
    required_declarations: Sequence[Authorize],
    any_one_policy_declarations: Sequence[AuthorizeOnAnyOnePolicy],
    security_scheme: str = DEFAULT_SECURITY_SCHEME,
) -> Operation:
    """
    Adds the 401/403 responses and the security requirement of an operation that requires authentication.

    Policy and role names are listed as the scopes of the security requirement.

    Returns:
        Operation: The updated operation.
    """
    if anonymous_present or not (required_declarations or any_one_policy_declarations):
        return operation

    policies = authorize_policies(required_declarations)
    roles = authorize_roles(required_declarations)
    any_one_policies = any_one_policy_policies(any_one_policy_declarations)

    responses = operation.setdefault("responses", {})
    if "401" not in responses:
        responses["401"] = {"description": "Unauthorized"}
    if policies or roles or any_one_policies:
        if "403" not in responses:
            responses["403"] = {"description": "Forbidden"}

    operation["security"] = [{security_scheme: [*policies, *roles, *any_one_policies]}]
    return operation


def annotate(
    operation: Operation,
    anonymous_present: bool,
    required_declarations: Sequence[Authorize],
    any_one_policy_declarations: Sequence[AuthorizeOnAnyOnePolicy],
    exclude_anonymous_text: bool = False,
    security_scheme: str = DEFAULT_SECURITY_SCHEME,
) -> Operation:
    """
    Applies both the description text and the security requirement to an operation.

    A handler with neither an anonymous marker nor any declaration is left untouched: it is authenticated, if at all,
    by the application's default policy.

    Returns:
        Operation: The updated operation.
    """
    append_authorization_to_description(
        operation,
        anonymous_present,
        required_declarations,
        any_one_policy_declarations,
        exclude_anonymous_text,
    )
    return add_security_requirement(
        operation,
        anonymous_present,
        required_declarations,
        any_one_policy_declarations,
        security_scheme,
    )


class AppendAuthorizationToDescription:
    """An operation filter that appends the authentication/authorization requirements to the description."""

    def __init__(self, exclude_allow_anonymous_description: bool = False) -> None:
        self.exclude_allow_anonymous_description = exclude_allow_anonymous_description

    def __call__(self, operation: Operation, context: OperationFilterContext) -> None:
        anonymous = bool(context.get_controller_and_action_declarations(AllowAnonymous))
        required = context.get_controller_and_action_declarations(Authorize)
        any_one = context.get_controller_and_action_declarations(AuthorizeOnAnyOnePolicy)
        logger.debug(
            "Describing %s %s: anonymous=%s, authorize=%d, any one policy=%d",
            context.api_description.http_method,
            context.route.path,
            anonymous,
            len(required),
            len(any_one),
        )
        append_authorization_to_description(
            operation, anonymous, required, any_one, self.exclude_allow_anonymous_description
        )


class AddSecurityRequirement:
    """An operation filter that adds the security requirement, and 401/403 responses, to secured operations."""

    def __init__(self, security_scheme: str = DEFAULT_SECURITY_SCHEME) -> None:
        self.security_scheme = security_scheme

    def __call__(self, operation: Operation, context: OperationFilterContext) -> None:
        add_security_requirement(
            operation,
            bool(context.get_controller_and_action_declarations(AllowAnonymous)),
            context.get_controller_and_action_declarations(Authorize),
            context.get_controller_and_action_declarations(AuthorizeOnAnyOnePolicy),
            self.security_scheme,
        )

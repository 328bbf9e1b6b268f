from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, ParamSpec, TypeVar

import wrapt
from starlette._utils import is_async_callable

from ._declarations import (
    AllowAnonymous,
    AuthorizationDeclaration,
    Authorize,
    AuthorizeOnAnyOnePolicy,
)

if TYPE_CHECKING:
    from ._controller import Controller

DECLARATIONS_ATTRIBUTE_NAME = "_swagauth_declarations_"
CONTROLLER_ATTRIBUTE_NAME = "_swagauth_controller_"


Param = ParamSpec("Param")
RetType = TypeVar("RetType")
DeclarationType = TypeVar("DeclarationType")


# pyright: basic
# These decorators can be used to decorate either sync or async functions.
# Based on example at https://github.com/GrahamDumpleton/wrapt/issues/150#issuecomment-893232442
def _declare(declaration: AuthorizationDeclaration):
    def wrapper(wrapped: Callable[Param, RetType]) -> Callable[Param, RetType]:
        @wrapt.decorator
        async def _async_authz(wrapped, instance, args, kwargs):
            return await wrapped(*args, **kwargs)

        @wrapt.decorator
        def _sync_authz(wrapped, instance, args, kwargs):
            return wrapped(*args, **kwargs)

        # Decorators are applied bottom-up, so prepending keeps the declarations in source order
        setattr(wrapped, DECLARATIONS_ATTRIBUTE_NAME, [declaration, *get_declarations(wrapped)])

        if is_async_callable(wrapped):
            return _async_authz(wrapped)  # type: ignore
        else:
            return _sync_authz(wrapped)  # type: ignore

    return wrapper


def allow_anonymous():
    """
    A decorator that marks the endpoint as not requiring authentication. It overrides every other declaration on
    the endpoint and its controller.
    """
    return _declare(AllowAnonymous())


def authorize(policy: Optional[str] = None, roles: Optional[str] = None):
    """
    A decorator that requires an authenticated user, optionally satisfying a named policy and/or a role.

    The decorator can be stacked; every stacked declaration must be satisfied.

    Args:
        policy (str, optional): The name of a registered policy the user must pass.
        roles (str, optional): A comma delimited list of roles; the user must be in at least one of them.
    """
    return _declare(Authorize(policy=policy, roles=roles))


def authorize_on_any_one_policy(policies: str):
    """
    A decorator that requires an authenticated user who passes any one of the listed policies.

    Only one such declaration is honored per endpoint. If several are applied, the top-most one wins.

    Args:
        policies (str): A comma delimited list of registered policy names.
    """
    return _declare(AuthorizeOnAnyOnePolicy(policies))


def get_controller(endpoint: Callable[..., Any]) -> Optional["Controller"]:
    """
    Gets the controller that owns an endpoint.

    Args:
        endpoint (Callable): The endpoint function.

    Returns:
        Controller | None: The owning controller, or `None` if the endpoint was not added through a controller.
    """
    return getattr(endpoint, CONTROLLER_ATTRIBUTE_NAME, None)


def get_declarations(endpoint: Callable[..., Any]) -> list[AuthorizationDeclaration]:
    """Gets the declarations applied directly to the endpoint function, in source order."""
    return list(getattr(endpoint, DECLARATIONS_ATTRIBUTE_NAME, []))


def get_controller_and_action_declarations(
    endpoint: Callable[..., Any], kind: type[DeclarationType]
) -> list[DeclarationType]:
    """
    Gets the declarations of a given kind that apply to an endpoint: those on the endpoint itself, followed by those
    on its controller.

    Args:
        endpoint (Callable): The endpoint function.
        kind (type): The declaration class to select.

    Returns:
        list: The matching declarations.
    """
    result = [d for d in get_declarations(endpoint) if isinstance(d, kind)]
    controller = get_controller(endpoint)
    if controller is not None:
        result.extend(d for d in controller.declarations if isinstance(d, kind))
    return result

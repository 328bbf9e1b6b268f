import logging
from collections.abc import Callable, Sequence
from typing import Any, Optional

from fastapi.routing import APIRouter

from ._declarations import AuthorizationDeclaration
from ._decorators import CONTROLLER_ATTRIBUTE_NAME
from ._route import SecureRoute

logger = logging.getLogger(__name__)


class Controller(APIRouter):
    """
    An `APIRouter` that groups related endpoints under a name, the way a controller does.

    A controller can carry an explicit documentation order and authorization declarations that apply to every
    endpoint it owns. Each endpoint added through the controller remembers its controller, so the information is
    still available after the controller has been included in an application.

    Example::

        tokens = Controller("Tokens", order=0, declarations=[AllowAnonymous()])


        @tokens.get("/GenerateUserToken")
        async def generate_user_token():
            ...

    Args:
        name (str):
            The controller name. Used as the default route prefix and tag, and as the tie-breaker when ordering.

        order (int, optional):
            The non-negative documentation order of the controller. Controllers without an order are placed after
            all ordered controllers.

        declarations (Sequence[AuthorizationDeclaration], optional):
            Authorization declarations that apply to every endpoint of the controller.
    """

    def __init__(
        self,
        name: str,
        *,
        order: Optional[int] = None,
        declarations: Sequence[AuthorizationDeclaration] = (),
        **kwargs: Any,
    ) -> None:
        if order is not None and order < 0:
            raise ValueError(f"Controller order must be non-negative, got {order}")
        kwargs.setdefault("prefix", f"/{name}")
        kwargs.setdefault("tags", [name])
        kwargs.setdefault("route_class", SecureRoute)
        super().__init__(**kwargs)
        self.name = name
        self.order = order
        self.declarations = tuple(declarations)

    def add_api_route(self, path: str, endpoint: Callable[..., Any], **kwargs: Any) -> None:
        setattr(endpoint, CONTROLLER_ATTRIBUTE_NAME, self)
        logger.debug("Controller %s owns endpoint %s", self.name, getattr(endpoint, "__name__", endpoint))
        super().add_api_route(path, endpoint, **kwargs)

    def __repr__(self) -> str:
        return f"Controller(name={self.name!r}, order={self.order!r})"

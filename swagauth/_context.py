from collections.abc import Callable
from typing import Any, Optional, TypeVar

from attr import frozen
from fastapi import FastAPI
from fastapi.routing import APIRoute

from ._controller import Controller
from ._decorators import get_controller, get_controller_and_action_declarations

DeclarationType = TypeVar("DeclarationType")


def api_routes(app: FastAPI) -> list[APIRoute]:
    """Gets the API routes of an application, including those copied in from included routers, in routing order."""
    return [route for route in app.routes if isinstance(route, APIRoute)]


@frozen
class ApiDescription:
    """One documented operation: a route together with one of its HTTP methods."""

    route: APIRoute
    http_method: str

    @property
    def controller(self) -> Optional[Controller]:
        return get_controller(self.route.endpoint)

    @property
    def controller_name(self) -> str:
        """
        Gets the name of the controller that owns the operation. Routes added outside a controller fall back to
        their first tag, or the empty string.
        """
        controller = self.controller
        if controller is not None:
            return controller.name
        if self.route.tags:
            return str(self.route.tags[0])
        return ""

    @property
    def relative_path(self) -> str:
        return self.route.path_format.lstrip("/")

    @classmethod
    def from_route(cls, route: APIRoute) -> list["ApiDescription"]:
        return [cls(route, method.lower()) for method in sorted(route.methods or [])]


@frozen
class OperationFilterContext:
    """The information an operation filter receives about the operation it is applied to."""

    api_description: ApiDescription

    @property
    def route(self) -> APIRoute:
        return self.api_description.route

    @property
    def endpoint(self) -> Callable[..., Any]:
        return self.api_description.route.endpoint

    def get_controller_and_action_declarations(self, kind: type[DeclarationType]) -> list[DeclarationType]:
        """
        Gets the declarations of a given kind on the operation's endpoint followed by those on its controller.

        Args:
            kind (type): The declaration class to select.

        Returns:
            list: The matching declarations.
        """
        return get_controller_and_action_declarations(self.endpoint, kind)

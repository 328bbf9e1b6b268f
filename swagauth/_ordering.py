import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from types import MappingProxyType

from fastapi import FastAPI

from ._context import ApiDescription, api_routes
from ._controller import Controller
from ._decorators import get_controller

METHODS_ORDER = ("get", "post", "put", "patch", "delete", "options", "trace")

# Sorts after every digit, so unordered controllers follow the ordered ones
UNORDERED_PAD = "~"

OrderBy = Callable[[ApiDescription], str]

logger = logging.getLogger(__name__)


class SwaggerControllerOrder:
    """
    Provides the sort keys that order controllers in the generated documentation.

    The mapping of controller names to orders is built once, from every controller that declares an order, and is
    read-only afterwards.

    Example:
        Order the operations by controller, then by path::

            controller_order = SwaggerControllerOrder.from_app(app)
            configure_openapi(app, order_by=order_by_controller_then_path(controller_order))

    Args:
        controllers (Iterable[Controller]): All of the application's controllers.
    """

    def __init__(self, controllers: Iterable[Controller]) -> None:
        orders = {c.name: c.order for c in controllers if c.order is not None}
        self._orders: Mapping[str, int] = MappingProxyType(orders)
        self._width = max((len(str(order)) for order in orders.values()), default=1)
        logger.debug("Controller orders: %s", orders)

    @classmethod
    def from_app(cls, app: FastAPI) -> "SwaggerControllerOrder":
        """
        Builds the controller order from the controllers whose endpoints are routed by the application.

        Args:
            app (FastAPI): The application.

        Returns:
            SwaggerControllerOrder: The controller order.
        """
        controllers: dict[int, Controller] = {}
        for route in api_routes(app):
            controller = get_controller(route.endpoint)
            if controller is not None:
                controllers.setdefault(id(controller), controller)
        return cls(controllers.values())

    @property
    def orders(self) -> Mapping[str, int]:
        return self._orders

    def sort_key(self, controller_name: str) -> str:
        """
        Gets the sort key of a controller: its zero-padded order followed by its name, or, for a controller without
        an order, a padding that sorts after every order followed by its name.

        Args:
            controller_name (str): The controller name.

        Returns:
            str: The sort key.
        """
        order = self._orders.get(controller_name)
        if order is None:
            return UNORDERED_PAD * self._width + controller_name
        return str(order).zfill(self._width) + controller_name


def order_by_controller(controller_order: SwaggerControllerOrder) -> OrderBy:
    """Orders operations by controller only."""

    def key(api_description: ApiDescription) -> str:
        return controller_order.sort_key(api_description.controller_name)

    return key


def order_by_controller_then_path(controller_order: SwaggerControllerOrder) -> OrderBy:
    """Orders operations by controller, then by relative path."""

    def key(api_description: ApiDescription) -> str:
        return f"{controller_order.sort_key(api_description.controller_name)}_{api_description.relative_path}"

    return key


def order_by_controller_then_method(
    controller_order: SwaggerControllerOrder, methods_order: Sequence[str] = METHODS_ORDER
) -> OrderBy:
    """
    Orders operations by controller, then by HTTP method as ordered in `methods_order`. Methods missing from
    `methods_order` come last.
    """

    def key(api_description: ApiDescription) -> str:
        method = api_description.http_method.lower()
        index = methods_order.index(method) if method in methods_order else len(methods_order)
        return f"{controller_order.sort_key(api_description.controller_name)}_{index}"

    return key

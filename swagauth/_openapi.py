import logging
from collections.abc import Sequence
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from ._annotator import DEFAULT_SECURITY_SCHEME, OperationFilter
from ._context import ApiDescription, OperationFilterContext, api_routes
from ._ordering import OrderBy

DEFAULT_SECURITY_SCHEME_DEFINITION: dict[str, Any] = {
    "type": "apiKey",
    "in": "header",
    "name": "Authorization",
    "scheme": "Bearer",
    "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"',
}

# Keys of an OpenAPI path item that hold operations
METHODS = frozenset(("get", "put", "post", "delete", "options", "head", "patch", "trace"))

logger = logging.getLogger(__name__)


def _api_descriptions(app: FastAPI) -> list[ApiDescription]:
    descriptions: list[ApiDescription] = []
    for route in api_routes(app):
        if route.include_in_schema:
            descriptions.extend(ApiDescription.from_route(route))
    return descriptions


def _ordered_paths(paths: dict[str, Any], descriptions: Sequence[ApiDescription]) -> dict[str, Any]:
    ordered: dict[str, Any] = {}
    for description in descriptions:
        path = description.route.path_format
        path_item = paths.get(path, {})
        if description.http_method in path_item:
            ordered.setdefault(path, {})[description.http_method] = path_item[description.http_method]
    # Anything not produced by a route (shared path parameters, extensions) keeps its place after the operations
    for path, path_item in paths.items():
        for key, value in path_item.items():
            ordered.setdefault(path, {}).setdefault(key, value)
    return ordered


def _warn_undescribed(paths: dict[str, Any], descriptions: Sequence[ApiDescription]) -> None:
    described = {(d.route.path_format, d.http_method) for d in descriptions}
    undescribed = [
        f"{method.upper()} {path}"
        for path, path_item in paths.items()
        for method in path_item
        if method in METHODS and (path, method) not in described
    ]
    if undescribed:
        # Operation filters and ordering only reach operations whose route is found in app.routes
        logger.warning("No route found for documented operations: %s", ", ".join(undescribed))


def build_openapi(
    app: FastAPI,
    *,
    title: Optional[str] = None,
    version: Optional[str] = None,
    order_by: Optional[OrderBy] = None,
    operation_filters: Sequence[OperationFilter] = (),
    security_scheme_name: str = DEFAULT_SECURITY_SCHEME,
    security_scheme: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Generates the OpenAPI document of an application, with its operations ordered and filtered.

    Returns:
        dict[str, Any]: The OpenAPI document.
    """
    schema = get_openapi(
        title=title or app.title,
        version=version or app.version,
        openapi_version=app.openapi_version,
        description=app.description,
        routes=app.routes,
        tags=app.openapi_tags,
        servers=app.servers,
    )

    descriptions = _api_descriptions(app)
    if order_by is not None:
        descriptions.sort(key=order_by)
        for description in descriptions:
            logger.debug(
                "Sort key %s for %s %s", order_by(description), description.http_method, description.route.path
            )
    paths = schema.get("paths") or {}
    _warn_undescribed(paths, descriptions)
    schema["paths"] = _ordered_paths(paths, descriptions)

    components = schema.setdefault("components", {})
    security_schemes = components.setdefault("securitySchemes", {})
    security_schemes[security_scheme_name] = dict(security_scheme or DEFAULT_SECURITY_SCHEME_DEFINITION)

    for description in descriptions:
        operation = schema["paths"].get(description.route.path_format, {}).get(description.http_method)
        if operation is None:
            continue
        context = OperationFilterContext(description)
        for operation_filter in operation_filters:
            operation_filter(operation, context)
    return schema


def configure_openapi(
    app: FastAPI,
    *,
    title: Optional[str] = None,
    version: Optional[str] = None,
    order_by: Optional[OrderBy] = None,
    operation_filters: Optional[Sequence[OperationFilter]] = None,
    security_scheme_name: str = DEFAULT_SECURITY_SCHEME,
    security_scheme: Optional[dict[str, Any]] = None,
) -> None:
    """
    Replaces the OpenAPI document generator of an application.

    Example:
        The example below orders the operations by controller and path, and documents the authorization
        requirements of each operation::

            from fastapi import FastAPI
            from swagauth import (
                AddSecurityRequirement,
                AppendAuthorizationToDescription,
                SwaggerControllerOrder,
                configure_openapi,
                order_by_controller_then_path,
            )

            app = FastAPI()
            ...
            configure_openapi(
                app,
                order_by=order_by_controller_then_path(SwaggerControllerOrder.from_app(app)),
                operation_filters=[AppendAuthorizationToDescription(), AddSecurityRequirement()],
            )

    Args:
        app (FastAPI):
            The application whose documentation is generated.

        title (str, optional):
            The document title. Defaults to the application title.

        version (str, optional):
            The document version. Defaults to the application version.

        order_by (OrderBy, optional):
            Returns the sort key of an operation. Operations keep their routing order if omitted.

        operation_filters (Sequence[OperationFilter], optional):
            Callables applied, in turn, to every documented operation.

        security_scheme_name (str, optional):
            The name under which the security scheme is registered. Defaults to `Bearer`.

        security_scheme (dict[str, Any], optional):
            The security scheme definition. Defaults to a bearer token in the `Authorization` header.
    """

    def openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema
        logger.info("Generating OpenAPI document for %s", title or app.title)
        app.openapi_schema = build_openapi(
            app,
            title=title,
            version=version,
            order_by=order_by,
            operation_filters=operation_filters or (),
            security_scheme_name=security_scheme_name,
            security_scheme=security_scheme,
        )
        return app.openapi_schema

    app.openapi = openapi  # type: ignore[method-assign]

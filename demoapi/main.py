import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from swagauth import (
    AddSecurityRequirement,
    AppendAuthorizationToDescription,
    SwaggerControllerOrder,
    add_endpoint_security,
    configure_openapi,
    order_by_controller_then_path,
)

from . import __version__
from .auth import JwtAuthBackend, security_group_policies
from .config import JwtSettings, load_settings
from .controllers import CONTROLLERS
from .services import GenerateTokensService

TITLE = "Append Authorization To Description Example"
DOCUMENT_NAME = "current"

logger = logging.getLogger(__name__)


def create_app(settings: Optional[JwtSettings] = None) -> FastAPI:
    """
    Creates the example application.

    Args:
        settings (JwtSettings, optional): The token settings. Loaded from the environment if omitted.

    Returns:
        FastAPI: The application.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title=TITLE,
        version=__version__,
        docs_url="/demoapi/swagger",
        openapi_url=f"/demoapi/swagger/{DOCUMENT_NAME}/swagger.json",
        redoc_url=None,
    )
    app.state.tokens_service = GenerateTokensService(settings)
    add_endpoint_security(app, backend=JwtAuthBackend(settings), policies=security_group_policies())

    for controller in CONTROLLERS:
        app.include_router(controller)

    controller_order = SwaggerControllerOrder.from_app(app)
    configure_openapi(
        app,
        order_by=order_by_controller_then_path(controller_order),
        operation_filters=[
            AppendAuthorizationToDescription(exclude_allow_anonymous_description=True),
            AddSecurityRequirement("Bearer"),
        ],
        security_scheme={
            "type": "apiKey",
            "in": "header",
            "name": "Authorization",
            "scheme": "Bearer",
            "description": 'JWT Authorization header using the Bearer scheme. Example: "Authorization: Bearer {token}"  '
            "A token can be acquired using any one of the /Tokens API calls.",
        },
    )
    logger.info("Created %s %s with %d controllers", TITLE, __version__, len(CONTROLLERS))
    return app


def main():
    logging.basicConfig(level="INFO")
    return uvicorn.run(host="0.0.0.0", port=8000, app=create_app(), reload=False)


if __name__ == "__main__":
    main()

"""Generate tokens API calls."""

from typing import Annotated

from fastapi import Depends
from fastapi.requests import Request
from pydantic import BaseModel

from swagauth import AllowAnonymous, Controller

from ..services import GenerateTokensService

tokens = Controller("Tokens", order=0, declarations=[AllowAnonymous()])


class TokenResponse(BaseModel):
    token: str


def get_tokens_service(request: Request) -> GenerateTokensService:
    return request.app.state.tokens_service


TokensService = Annotated[GenerateTokensService, Depends(get_tokens_service)]


@tokens.get("/GenerateUserToken", response_model=TokenResponse)
def generate_user_token_no_groups(service: TokensService):
    """Generates a user token (with no groups)."""
    return TokenResponse(token=service.generate_user_token_no_groups())


@tokens.get("/GenerateManagementUserToken", response_model=TokenResponse)
def generate_manager_token(service: TokensService):
    """Generates a management user token."""
    return TokenResponse(token=service.generate_manager_token())


@tokens.get("/GenerateAdministrativeUserToken", response_model=TokenResponse)
def generate_administrator_token(service: TokensService):
    """Generates an administrative user token."""
    return TokenResponse(token=service.generate_administrator_token())


@tokens.get("/GenerateManagementAdministratorUserToken", response_model=TokenResponse)
def generate_manager_administrator_token(service: TokensService):
    """Generates a management user with administrative privileges token."""
    return TokenResponse(token=service.generate_manager_administrator_token())

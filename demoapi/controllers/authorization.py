"""The authorization test API calls."""

from fastapi.requests import Request

from swagauth import Authorize, Controller, authorize, authorize_on_any_one_policy

authorization = Controller("Authorization", declarations=[Authorize()])


def _greeting(request: Request) -> dict[str, str]:
    return {"message": f"Hello, {request.user.display_name}"}


@authorization.get("/TestForAnAuthenticatedUser")
async def test_for_an_authenticated_user(request: Request):
    """Test for an authenticated user. No group privileges needed."""
    return _greeting(request)


@authorization.get("/TestForAnAdministrator")
@authorize(policy="Administrator")
async def test_for_an_administrator(request: Request):
    """Test for a user with administrator privileges."""
    return _greeting(request)


@authorization.get("/TestForAManager")
@authorize(policy="Manager")
async def test_for_a_manager(request: Request):
    """Test for a user with manager privileges."""
    return _greeting(request)


@authorization.get("/TestForAManagerAdministrator")
@authorize(policy="Manager")
@authorize(policy="Administrator")
async def test_for_a_manager_administrator(request: Request):
    """Test for a user with manager and administrator privileges."""
    return _greeting(request)


@authorization.get("/TestForEitherAManagerOrAdministrator")
@authorize_on_any_one_policy("Manager, Administrator")
async def test_for_either_a_manager_or_administrator(request: Request):
    """Test for a user with either manager and/or administrator privileges."""
    return _greeting(request)

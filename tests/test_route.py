import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    AuthenticationError,
    SimpleUser,
)

from swagauth import (
    Allow,
    Authenticated,
    Authorize,
    Controller,
    HasClaim,
    SecureRoute,
    UnknownPolicyError,
    add_endpoint_security,
    allow_anonymous,
    authorize,
    authorize_on_any_one_policy,
)


class HeaderUser(SimpleUser):
    def __init__(self, username, claims):
        super().__init__(username)
        self.claims = claims


class HeaderAuthBackend(AuthenticationBackend):
    """Authenticates from `X-User`, `X-Groups` and `X-Roles` headers."""

    async def authenticate(self, conn):
        username = conn.headers.get("X-User")
        if not username:
            return None
        if username == "rejected":
            raise AuthenticationError("Rejected user")
        groups = [g for g in conn.headers.get("X-Groups", "").split(",") if g]
        roles = [r for r in conn.headers.get("X-Roles", "").split(",") if r]
        return AuthCredentials(groups), HeaderUser(username, {"groups": groups, "roles": roles})


secured = Controller("Secured", declarations=[Authorize()])
public = Controller("Public")


@secured.get("/authenticated")
async def authenticated_endpoint():
    return {"ok": True}


@secured.get("/administrator")
@authorize(policy="Administrator")
def administrator_endpoint():
    return {"ok": True}


@secured.get("/both")
@authorize(policy="Manager")
@authorize(policy="Administrator")
async def both_endpoint():
    return {"ok": True}


@secured.get("/either")
@authorize_on_any_one_policy("Manager , Administrator")
async def either_endpoint():
    return {"ok": True}


@secured.get("/first-wins")
@authorize_on_any_one_policy("Manager")
@authorize_on_any_one_policy("Administrator")
async def first_wins_endpoint():
    return {"ok": True}


@secured.get("/role")
@authorize(roles="Auditor, Accountant")
async def role_endpoint():
    return {"ok": True}


@secured.get("/open")
@allow_anonymous()
async def open_endpoint():
    return {"ok": True}


@secured.get("/unknown")
@authorize(policy="Nobody")
async def unknown_endpoint():
    return {"ok": True}


@public.get("/default")
async def default_endpoint():
    return {"ok": True}


POLICIES = {
    "Administrator": HasClaim("groups", "Administrator"),
    "Manager": HasClaim("groups", "Manager"),
}


def _make_app(**kwargs):
    app = FastAPI()
    add_endpoint_security(app, backend=HeaderAuthBackend(), policies=POLICIES, **kwargs)
    app.include_router(secured)
    app.include_router(public)

    @app.get("/plain")
    @authorize(policy="Manager")
    async def plain_endpoint():
        return {"ok": True}

    return app


@pytest.fixture
def client():
    with TestClient(_make_app()) as client:
        yield client


def _user(groups="", roles=""):
    return {"X-User": "someone", "X-Groups": groups, "X-Roles": roles}


class TestAuthentication:
    def test_anonymous_rejected(self, client):
        response = client.get("/Secured/authenticated")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_authenticated_allowed(self, client):
        assert client.get("/Secured/authenticated", headers=_user()).status_code == 200

    def test_backend_error_is_unauthorized(self, client):
        response = client.get("/Secured/authenticated", headers={"X-User": "rejected"})

        assert response.status_code == 401
        assert response.json() == {"detail": "Rejected user"}

    def test_allow_anonymous_overrides_controller(self, client):
        assert client.get("/Secured/open").status_code == 200


class TestPolicies:
    def test_policy_unauthenticated(self, client):
        assert client.get("/Secured/administrator").status_code == 401

    def test_policy_failed(self, client):
        assert client.get("/Secured/administrator", headers=_user("Manager")).status_code == 403

    def test_policy_passed(self, client):
        assert client.get("/Secured/administrator", headers=_user("Administrator")).status_code == 200

    def test_every_policy_required(self, client):
        assert client.get("/Secured/both", headers=_user("Manager")).status_code == 403
        assert client.get("/Secured/both", headers=_user("Manager,Administrator")).status_code == 200

    @pytest.mark.parametrize("groups", ["Manager", "Administrator", "Manager,Administrator"])
    def test_any_one_policy(self, client, groups):
        assert client.get("/Secured/either", headers=_user(groups)).status_code == 200

    def test_any_one_policy_none_passed(self, client):
        response = client.get("/Secured/either", headers=_user("Auditor"))

        assert response.status_code == 403
        assert "Manager, Administrator" in response.json()["detail"]

    def test_first_any_one_declaration_wins(self, client):
        assert client.get("/Secured/first-wins", headers=_user("Manager")).status_code == 200
        assert client.get("/Secured/first-wins", headers=_user("Administrator")).status_code == 403

    def test_app_level_route(self, client):
        assert client.get("/plain", headers=_user("Auditor")).status_code == 403
        assert client.get("/plain", headers=_user("Manager")).status_code == 200

    def test_unknown_policy(self, client):
        with pytest.raises(UnknownPolicyError):
            client.get("/Secured/unknown", headers=_user())


class TestRoles:
    @pytest.mark.parametrize("roles", ["Auditor", "Accountant"])
    def test_any_one_role(self, client, roles):
        assert client.get("/Secured/role", headers=_user(roles=roles)).status_code == 200

    def test_no_role(self, client):
        assert client.get("/Secured/role", headers=_user(roles="Clerk")).status_code == 403


class TestDefaultPolicy:
    def test_allow_by_default(self, client):
        assert client.get("/Public/default").status_code == 200

    def test_configured_default(self):
        with TestClient(_make_app(default_policy=Authenticated())) as client:
            assert client.get("/Public/default").status_code == 401
            assert client.get("/Public/default", headers=_user()).status_code == 200

    def test_registry(self):
        app = _make_app()
        assert set(app.state.authz_policies) == {"Administrator", "Manager"}


class TestSeparateApps:
    def test_policies_kept_per_app(self):
        first = _make_app()
        second = FastAPI()
        add_endpoint_security(second, backend=HeaderAuthBackend(), policies={}, default_policy=Authenticated())
        second.include_router(public)

        with TestClient(first) as client:
            assert client.get("/Secured/administrator", headers=_user("Administrator")).status_code == 200
            assert client.get("/Public/default").status_code == 200
        with TestClient(second) as client:
            assert client.get("/Public/default").status_code == 401

    def test_unconfigured_app_uses_route_default(self):
        app = FastAPI()
        app.include_router(public)

        with TestClient(app) as client:
            assert client.get("/Public/default").status_code == 200
        assert isinstance(SecureRoute.default_policy, Allow)

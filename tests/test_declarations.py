import asyncio
import inspect

import pytest

from swagauth import (
    AllowAnonymous,
    Authorize,
    AuthorizeOnAnyOnePolicy,
    Controller,
    allow_anonymous,
    authorize,
    authorize_on_any_one_policy,
    get_controller,
    get_controller_and_action_declarations,
    get_declarations,
)


class TestAuthorizeOnAnyOnePolicy:
    @pytest.mark.parametrize(
        "policies",
        ["Manager,Administrator", "Manager, Administrator", "Manager ,Administrator", "Manager  ,  Administrator"],
    )
    def test_whitespace_around_commas_removed(self, policies):
        declaration = AuthorizeOnAnyOnePolicy(policies)

        assert declaration.policies == "Manager,Administrator"
        assert declaration.policy_names == ["Manager", "Administrator"]

    def test_empty_entries_dropped(self):
        assert AuthorizeOnAnyOnePolicy(" Manager,, ").policy_names == ["Manager"]
        assert AuthorizeOnAnyOnePolicy("   ").policy_names == []

    def test_equality(self):
        assert AuthorizeOnAnyOnePolicy("A , B") == AuthorizeOnAnyOnePolicy("A,B")
        assert Authorize(policy="A") != Authorize(roles="A")


class TestDecorators:
    def test_declarations_in_source_order(self):
        @authorize(policy="Manager")
        @authorize(policy="Administrator")
        @authorize_on_any_one_policy("A, B")
        def endpoint():
            return "called"

        assert get_declarations(endpoint) == [
            Authorize(policy="Manager"),
            Authorize(policy="Administrator"),
            AuthorizeOnAnyOnePolicy("A,B"),
        ]
        assert endpoint() == "called"

    def test_async_endpoint_stays_async(self):
        @allow_anonymous()
        async def endpoint(value):
            return value * 2

        assert inspect.iscoroutinefunction(endpoint)
        assert asyncio.run(endpoint(21)) == 42
        assert get_declarations(endpoint) == [AllowAnonymous()]

    def test_undecorated(self):
        def endpoint():
            pass

        assert get_declarations(endpoint) == []
        assert get_controller(endpoint) is None


class TestControllerDeclarations:
    def test_action_then_controller(self):
        controller = Controller("Reports", declarations=[Authorize(), AllowAnonymous()])

        @controller.get("/summary")
        @authorize(policy="Auditor")
        def summary():
            return {}

        assert get_controller(summary) is controller
        assert get_controller_and_action_declarations(summary, Authorize) == [Authorize(policy="Auditor"), Authorize()]
        assert get_controller_and_action_declarations(summary, AllowAnonymous) == [AllowAnonymous()]
        assert get_controller_and_action_declarations(summary, AuthorizeOnAnyOnePolicy) == []

    def test_defaults(self):
        controller = Controller("Reports")

        assert controller.prefix == "/Reports"
        assert controller.tags == ["Reports"]
        assert controller.order is None
        assert controller.declarations == ()

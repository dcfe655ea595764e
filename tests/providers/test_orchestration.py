"""
Tests for the convergence loop.
"""

import pytest

from warren.core.errors import ExternalToolError, ParseError
from warren.core.infra.contracts import ProviderContract
from warren.core.project.models import ExchangeDeclaration, UserPermissionsDeclaration
from warren.providers import build_provider
from warren.providers.orchestration import (
    CREATED,
    DESTROYED,
    FAILED,
    PLANNED,
    SKIPPED,
    UNCHANGED,
    UPDATED,
    converge,
    plan,
    run_pass,
)
from warren.providers.rabbitmq.exchange import ExchangeProvider
from warren.providers.rabbitmq.user_permissions import UserPermissionsProvider


class TestConverge:
    """Test a single resource pass."""

    def test_unchanged(self, permissions, ctl, cache):
        """Test no mutation when observed matches declared."""
        ctl.rabbitmqctl_list.return_value = "bar 1 2 3\n"
        provider = UserPermissionsProvider(permissions(configure_permission="1"), ctl, cache=cache)

        result = converge(provider)

        assert result.action == UNCHANGED
        ctl.rabbitmqctl.assert_not_called()

    def test_create(self, permissions, ctl, cache):
        """Test a missing grant is created."""
        provider = UserPermissionsProvider(permissions(read_permission=".*"), ctl, cache=cache)

        result = converge(provider)

        assert result.action == CREATED
        ctl.rabbitmqctl.assert_called_once_with("set_permissions", "-p", "bar", "foo", "''", "''", ".*")

    def test_destroy(self, permissions, ctl, cache):
        """Test an existing grant declared absent is cleared."""
        ctl.rabbitmqctl_list.return_value = "bar 1 2 3\n"
        provider = UserPermissionsProvider(permissions(ensure="absent"), ctl, cache=cache)

        result = converge(provider)

        assert result.action == DESTROYED
        ctl.rabbitmqctl.assert_called_once_with("clear_permissions", "-p", "bar", "foo")

    def test_update_is_one_call(self, permissions, ctl, cache):
        """Test two drifted capabilities produce one set_permissions."""
        ctl.rabbitmqctl_list.return_value = "bar 1 2 3\n"
        declaration = permissions(configure_permission="foo", read_permission="foo")
        provider = UserPermissionsProvider(declaration, ctl, cache=cache)

        result = converge(provider)

        assert result.action == UPDATED
        assert len(result.diffs) == 2
        ctl.rabbitmqctl.assert_called_once_with("set_permissions", "-p", "bar", "foo", "foo", "2", "foo")
        assert ctl.rabbitmqctl_list.call_count == 1

    def test_dry_run(self, permissions, ctl, cache):
        """Test dry run never mutates."""
        provider = UserPermissionsProvider(permissions(), ctl, cache=cache)

        result = converge(provider, dry_run=True)

        assert result.action == PLANNED
        ctl.rabbitmqctl.assert_not_called()

    def test_creation_only_drift_not_applied(self, exchange, ctl, cache):
        """Test exchange attribute drift is reported but not mutated."""
        ctl.rabbitmqctl_list.return_value = "myexchange\tfanout\tfalse\tfalse\tfalse\n"
        provider = ExchangeProvider(exchange(), ctl, cache=cache)

        result = converge(provider)

        assert result.action == UNCHANGED
        assert [d.field for d in result.diffs] == ["type"]
        ctl.rabbitmqadmin.assert_not_called()

    def test_errors_propagate(self, permissions, ctl, cache):
        """Test parse errors abort the pass."""
        ctl.rabbitmqctl_list.return_value = "bar 1 2 3 4\n"
        provider = UserPermissionsProvider(permissions(), ctl, cache=cache)

        with pytest.raises(ParseError):
            converge(provider)
        ctl.rabbitmqctl.assert_not_called()


class TestRunPass:
    """Test a pass over several declarations."""

    def test_failed_dependency_skips_dependents(self, permissions, exchange, ctl, cache):
        """Test an exchange is skipped when its user's permissions failed."""
        def listing(resource, *opts):
            if resource == "user_permissions":
                return "myvhost 1 2\n"
            return ""
        ctl.rabbitmqctl_list.side_effect = listing

        results = run_pass(
            [exchange(user="dan"), permissions("dan@myvhost"), permissions("eve@myvhost")],
            ctl,
            cache=cache,
        )

        by_ref = {r.ref: r for r in results}
        assert by_ref["user_permissions[dan@myvhost]"].action == FAILED
        assert "cannot parse line" in by_ref["user_permissions[dan@myvhost]"].error
        assert by_ref["exchange[myexchange@myvhost]"].action == SKIPPED
        ctl.rabbitmqadmin.assert_not_called()

    def test_independent_resources_continue(self, permissions, ctl, cache):
        """Test a tool failure on one user does not stop others."""
        def listing(resource, user):
            if user == "dan":
                raise ExternalToolError(["rabbitmqctl", "list_user_permissions", "dan"], 2, "no_such_user")
            return ""
        ctl.rabbitmqctl_list.side_effect = listing

        results = run_pass([permissions("dan@v"), permissions("eve@v")], ctl, cache=cache)

        assert [r.action for r in results] == [FAILED, CREATED]

    def test_fail_fast(self, permissions, ctl, cache):
        """Test fail_fast re-raises the first error."""
        ctl.rabbitmqctl_list.return_value = "v 1\n"

        with pytest.raises(ParseError):
            run_pass([permissions("dan@v"), permissions("eve@v")], ctl, cache=cache, fail_fast=True)

    def test_pass_starts_from_fresh_listing(self, permissions, ctl, cache):
        """Test stale cached listings are dropped at the start of a pass."""
        cache.lines("user_permissions", "foo", lambda: "bar 9 9 9")
        ctl.rabbitmqctl_list.return_value = "bar 1 2 3\n"

        results = run_pass([permissions(configure_permission="1")], ctl, cache=cache)

        assert results[0].action == UNCHANGED
        ctl.rabbitmqctl_list.assert_called_once_with("user_permissions", "foo")

    def test_one_listing_per_user_per_pass(self, permissions, ctl, cache):
        """Test an update on one vhost does not re-list the user for the next vhost."""
        ctl.rabbitmqctl_list.return_value = "bar 1 2 3\nbaz 4 5 6\n"

        results = run_pass(
            [permissions("foo@bar", configure_permission="x"), permissions("foo@baz", configure_permission="4")],
            ctl,
            cache=cache,
        )

        assert [r.action for r in results] == [UPDATED, UNCHANGED]
        assert ctl.rabbitmqctl_list.call_count == 1
        ctl.rabbitmqctl.assert_called_once_with("set_permissions", "-p", "bar", "foo", "x", "2", "3")

    def test_plan(self, permissions, ctl, cache):
        """Test plan lists actions without mutating."""
        ctl.rabbitmqctl_list.return_value = "bar 1 2 3\n"

        result = plan([permissions(write_permission=".*"), permissions("foo@baz")], ctl, cache=cache)

        assert result.actions == [
            "Actualizar user_permissions[foo@bar].write_permission: 2 → .*",
            "Crear user_permissions[foo@baz]",
        ]
        ctl.rabbitmqctl.assert_not_called()


class TestBuildProvider:
    """Test provider selection by declaration kind."""

    @pytest.mark.parametrize("declaration,provider_cls", [
        (UserPermissionsDeclaration(name="foo@bar"), UserPermissionsProvider),
        (ExchangeDeclaration(name="myexchange@myvhost", type="topic"), ExchangeProvider),
    ])
    def test_builds_contract_provider(self, declaration, provider_cls, ctl, cache):
        """Test every registered provider fulfils the provider contract."""
        provider = build_provider(declaration, ctl, cache=cache)

        assert isinstance(provider, provider_cls)
        assert isinstance(provider, ProviderContract)
        ctl.rabbitmqctl_list.assert_not_called()

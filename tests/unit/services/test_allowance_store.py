"""
Tests for delegated spending limits and the delegated transfer path.
"""

import pytest

from ntoken.contracts import NAsset, Symbol
from ntoken.models.allowance import Allowance
from ntoken.utils.exceptions import (
    InsufficientBalance,
    InvalidArgument,
    LedgerErrorCodes,
    Unauthorized,
)

FAMILY = 5
TOKEN = Symbol(1, FAMILY)


def nasset(amount, symbol=TOKEN):
    return NAsset(amount=amount, symbol=symbol)


class TestApprove:
    def test_approve_sets_limit(self, allowances, make_ctx):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 3)
        assert allowances.get_limits("alice", "dave") == {FAMILY: 3}

    def test_approve_overwrites(self, allowances, make_ctx):
        ctx = make_ctx("alice")
        allowances.approve(ctx, "alice", "dave", FAMILY, 3)
        allowances.approve(ctx, "alice", "dave", FAMILY, 7)

        assert allowances.get_limits("alice", "dave") == {FAMILY: 7}

    def test_repeated_approve_is_idempotent(self, allowances, make_ctx, db_session):
        ctx = make_ctx("alice")
        allowances.approve(ctx, "alice", "dave", FAMILY, 3)
        allowances.approve(ctx, "alice", "dave", FAMILY, 3)

        assert allowances.get_limits("alice", "dave") == {FAMILY: 3}
        assert db_session.query(Allowance).count() == 1

    def test_approve_zero_revokes_spending(self, allowances, make_ctx):
        ctx = make_ctx("alice")
        allowances.approve(ctx, "alice", "dave", FAMILY, 3)
        allowances.approve(ctx, "alice", "dave", FAMILY, 0)

        assert allowances.get_limits("alice", "dave") == {FAMILY: 0}

    def test_limits_per_family(self, allowances, make_ctx):
        ctx = make_ctx("alice")
        allowances.approve(ctx, "alice", "dave", 5, 3)
        allowances.approve(ctx, "alice", "dave", 6, 4)

        assert allowances.get_limits("alice", "dave") == {5: 3, 6: 4}

    def test_multiple_spenders_are_independent(self, allowances, make_ctx):
        """Approving a second spender keeps the first spender's limit"""
        ctx = make_ctx("alice")
        allowances.approve(ctx, "alice", "dave", FAMILY, 3)
        allowances.approve(ctx, "alice", "carol", FAMILY, 9)

        assert allowances.get_limits("alice", "dave") == {FAMILY: 3}
        assert allowances.get_limits("alice", "carol") == {FAMILY: 9}

    def test_approve_requires_owner(self, allowances, make_ctx):
        with pytest.raises(Unauthorized):
            allowances.approve(make_ctx("dave"), "alice", "dave", FAMILY, 3)

    def test_negative_amount(self, allowances, make_ctx):
        with pytest.raises(InvalidArgument):
            allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, -1)

    def test_no_limits(self, allowances):
        assert allowances.get_limits("alice", "dave") == {}


class TestConsume:
    def test_consume_decrements(self, allowances, make_ctx):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 3)

        assert allowances.consume("alice", "dave", FAMILY, 2) == 1
        assert allowances.get_limits("alice", "dave") == {FAMILY: 1}

    def test_consume_over_limit(self, allowances, make_ctx):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 3)

        with pytest.raises(Unauthorized) as exc_info:
            allowances.consume("alice", "dave", FAMILY, 4)

        assert exc_info.value.error_code == LedgerErrorCodes.ALLOWANCE_EXCEEDED

    def test_consume_unknown_family(self, allowances, make_ctx):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 3)

        with pytest.raises(Unauthorized) as exc_info:
            allowances.consume("alice", "dave", 6, 1)

        assert exc_info.value.error_code == LedgerErrorCodes.ALLOWANCE_NOT_FOUND


class TestTransferFrom:
    @pytest.fixture(autouse=True)
    def _alice_holds_ten(self, registry, ledger, make_ctx):
        registry.create(make_ctx("alice"), "alice", 100, Symbol(0, FAMILY), "ipfs://a")
        ledger.issue(make_ctx("alice"), "alice", nasset(10))

    def test_spends_allowance(self, ledger, allowances, make_ctx, queries):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 3)

        ledger.transferfrom(make_ctx("dave"), "dave", "alice", "carol", [nasset(2)])

        assert queries.get_balance("carol", TOKEN) == 2
        assert queries.get_balance("alice", TOKEN) == 8
        assert allowances.get_limits("alice", "dave") == {FAMILY: 1}
        assert queries.find_balance("carol", 1).payer == "dave"

    def test_overspending_is_rejected(self, ledger, allowances, make_ctx, queries):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 3)
        ledger.transferfrom(make_ctx("dave"), "dave", "alice", "carol", [nasset(2)])

        with pytest.raises(Unauthorized):
            ledger.transferfrom(make_ctx("dave"), "dave", "alice", "carol", [nasset(2)])

        assert queries.get_balance("carol", TOKEN) == 2
        assert allowances.get_limits("alice", "dave") == {FAMILY: 1}

    def test_without_allowance(self, ledger, make_ctx):
        with pytest.raises(Unauthorized) as exc_info:
            ledger.transferfrom(make_ctx("dave"), "dave", "alice", "carol", [nasset(1)])

        assert exc_info.value.error_code == LedgerErrorCodes.ALLOWANCE_NOT_FOUND

    def test_allowance_for_other_family(self, ledger, allowances, make_ctx):
        allowances.approve(make_ctx("alice"), "alice", "dave", 6, 3)

        with pytest.raises(Unauthorized):
            ledger.transferfrom(make_ctx("dave"), "dave", "alice", "carol", [nasset(1)])

    def test_requires_delegate_signature(self, ledger, allowances, make_ctx):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 3)

        with pytest.raises(Unauthorized) as exc_info:
            ledger.transferfrom(make_ctx("carol"), "dave", "alice", "carol", [nasset(1)])

        assert exc_info.value.error_code == LedgerErrorCodes.MISSING_AUTHORITY

    def test_failed_move_restores_allowance(self, ledger, allowances, make_ctx):
        allowances.approve(make_ctx("alice"), "alice", "dave", FAMILY, 50)

        with pytest.raises(InsufficientBalance):
            ledger.transferfrom(make_ctx("dave"), "dave", "alice", "carol", [nasset(20)])

        assert allowances.get_limits("alice", "dave") == {FAMILY: 50}

    def test_spender_of_other_owner_gets_nothing(self, ledger, allowances, make_ctx):
        allowances.approve(make_ctx("bob"), "bob", "dave", FAMILY, 3)

        with pytest.raises(Unauthorized):
            ledger.transferfrom(make_ctx("dave"), "dave", "alice", "carol", [nasset(1)])

"""
Tests for the transfer-gating capabilities and ledger profiles.
"""

from unittest.mock import Mock

import pytest

from ntoken.contracts import NAsset, Symbol
from ntoken.services.capabilities import (
    CREDENTIAL_PROFILE,
    GENERIC_PROFILE,
    CanReceive,
    CanSend,
    HasAllowance,
    PermissionFlagCheck,
    SingletonCapCheck,
    TransferLeg,
    get_ledger_profile,
)
from ntoken.utils.exceptions import LedgerErrorCodes


def row(amount=0, allow_send=False, allow_recv=False):
    balance = Mock()
    balance.amount = amount
    balance.allow_send = allow_send
    balance.allow_recv = allow_recv
    return balance


def leg(amount=1, sender_row=None, recipient_row=None):
    return TransferLeg(
        sender="alice",
        recipient="bob",
        quantity=NAsset(amount, Symbol(1, 0)),
        sender_row=sender_row,
        recipient_row=recipient_row,
    )


class TestPermissionChecks:
    def test_can_send(self):
        assert CanSend().check(leg(sender_row=row(allow_send=True)))
        assert not CanSend().check(leg(sender_row=row()))

    def test_can_receive_needs_existing_row(self):
        assert not CanReceive().check(leg(recipient_row=None))
        assert CanReceive().check(leg(recipient_row=row(allow_recv=True)))

    def test_either_flag_passes(self):
        check = PermissionFlagCheck()

        assert check.check(leg(sender_row=row(allow_send=True)))
        assert check.check(leg(sender_row=row(), recipient_row=row(allow_recv=True)))

        result = check.check(leg(sender_row=row(), recipient_row=row()))
        assert result.error_code == LedgerErrorCodes.TRANSFER_NOT_PERMITTED


class TestSingletonCap:
    def test_first_unit_passes(self):
        assert SingletonCapCheck().check(leg())
        assert SingletonCapCheck().check(leg(recipient_row=row(amount=0)))

    def test_holder_is_rejected(self):
        result = SingletonCapCheck().check(leg(recipient_row=row(amount=1)))
        assert result.error_code == LedgerErrorCodes.SINGLETON_CAP_EXCEEDED

    def test_bulk_quantity_is_rejected(self):
        assert not SingletonCapCheck().check(leg(amount=2))


class TestHasAllowance:
    def test_within_limit(self):
        assert HasAllowance().check({5: 3}, 5, 3)

    def test_over_limit(self):
        assert HasAllowance().check({5: 3}, 5, 4).error_code == LedgerErrorCodes.ALLOWANCE_EXCEEDED

    def test_missing_family(self):
        assert HasAllowance().check({5: 3}, 6, 1).error_code == LedgerErrorCodes.ALLOWANCE_NOT_FOUND


class TestLedgerProfiles:
    def test_generic_profile_has_no_checks(self):
        assert GENERIC_PROFILE.check_leg(leg(amount=50))
        assert GENERIC_PROFILE.allow_delegated_transfer
        assert GENERIC_PROFILE.max_assets_per_transfer is None

    def test_credential_profile_checks_cap_first(self):
        result = CREDENTIAL_PROFILE.check_leg(leg(amount=2, sender_row=row()))
        assert result.error_code == LedgerErrorCodes.SINGLETON_CAP_EXCEEDED

    def test_lookup(self):
        assert get_ledger_profile("credential") is CREDENTIAL_PROFILE

        with pytest.raises(ValueError):
            get_ledger_profile("unknown")

"""
Tests for batch processing of ledger actions.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from ntoken.contracts import StaticAccountDirectory
from ntoken.services.actions import ActionBatch, ActionEnvelope
from ntoken.services.capabilities import GENERIC_PROFILE
from ntoken.services.global_state import GlobalStateStore
from ntoken.services.processor import ActionProcessor
from ntoken.utils.exceptions import LedgerErrorCodes

ACCOUNTS = StaticAccountDirectory(["alice", "bob", "carol", "dave", "flon.ntoken", "notary1"])


def envelope(name, signers, **data):
    return ActionEnvelope(name=name, authorization=list(signers), data=data)


def create(issuer="alice", uri="ipfs://a", symbol_id=0, parent_id=5):
    return envelope(
        "create",
        [issuer],
        issuer=issuer,
        max_supply=100,
        symbol={"id": symbol_id, "parent_id": parent_id},
        token_uri=uri,
    )


def asset(amount, symbol_id=1, parent_id=5):
    return {"amount": amount, "symbol": {"id": symbol_id, "parent_id": parent_id}}


class TestActionProcessor:
    @pytest.fixture(autouse=True)
    def _processor(self, db_session):
        self.db = db_session
        self.processor = ActionProcessor(db_session, profile=GENERIC_PROFILE)

    def test_create_issue_transfer(self):
        results = self.processor.process_batch(
            [
                create(),
                envelope("issue", ["alice"], to="alice", quantity=asset(10)),
                envelope("transfer", ["alice"], **{"from": "alice", "to": "bob", "assets": [asset(4)]}),
            ],
            ACCOUNTS,
        )

        assert [r.is_valid for r in results] == [True, True, True]
        assert results[0].symbol_id == 1
        assert results[1].amount == 10
        assert self.processor.ledger.validator.get_token(1).supply == 10

    def test_rejected_action_does_not_affect_others(self):
        results = self.processor.process_batch(
            [
                create(),
                envelope("issue", ["alice"], to="alice", quantity=asset(10)),
                envelope("retire", ["alice"], quantity=asset(11)),
                envelope("retire", ["alice"], quantity=asset(3)),
            ],
            ACCOUNTS,
        )

        assert [r.is_valid for r in results] == [True, True, False, True]
        assert results[2].error_code == LedgerErrorCodes.INSUFFICIENT_BALANCE
        assert self.processor.registry.get(1).supply == 7

    def test_unknown_action(self):
        results = self.processor.process_batch([envelope("mint", ["alice"])], ACCOUNTS)

        assert results[0].is_valid is False
        assert results[0].error_code == LedgerErrorCodes.UNKNOWN_ACTION

    def test_malformed_payload(self):
        results = self.processor.process_batch([envelope("issue", ["alice"], to="alice")], ACCOUNTS)

        assert results[0].error_code == LedgerErrorCodes.MALFORMED_ACTION

    def test_out_of_range_ids_are_rejected_without_losing_the_batch(self):
        """Ids past the signed 64-bit range fail their own action only"""
        results = self.processor.process_batch(
            [
                create(),
                create(uri="ipfs://b", symbol_id=2**63),
                envelope("settokenuri", ["flon.ntoken"], symbol_id=2**64, url="ipfs://c"),
                envelope("issue", ["alice"], to="alice", quantity=asset(10)),
            ],
            ACCOUNTS,
        )

        assert [r.is_valid for r in results] == [True, False, False, True]
        assert results[1].error_code == LedgerErrorCodes.MALFORMED_ACTION
        assert results[2].error_code == LedgerErrorCodes.MALFORMED_ACTION

        self.db.rollback()
        assert self.processor.registry.get(1).supply == 10

    def test_signers_are_per_action(self):
        results = self.processor.process_batch(
            [
                create(),
                envelope("issue", ["bob"], to="alice", quantity=asset(10)),
            ],
            ACCOUNTS,
        )

        assert results[1].error_code == LedgerErrorCodes.MISSING_AUTHORITY

    def test_global_state_is_persisted(self):
        self.processor.process_batch(
            [
                envelope("setnotary", ["flon.ntoken"], notary="notary1", add=True),
                envelope("setcreator", ["flon.ntoken"], creator="alice", add=True),
                envelope("setcheck", ["flon.ntoken"], check_creator=True),
            ],
            ACCOUNTS,
        )

        state = GlobalStateStore(self.db).load()
        assert state.notaries == {"notary1"}
        assert state.creators == {"alice"}
        assert state.check_creator is True

    def test_global_state_spans_batches(self):
        self.processor.process_batch([envelope("setcheck", ["flon.ntoken"], check_creator=True)], ACCOUNTS)

        results = self.processor.process_batch([create()], ACCOUNTS)

        assert results[0].error_code == LedgerErrorCodes.CREATOR_NOT_AUTHORIZED

    def test_delegated_flow(self):
        results = self.processor.process_batch(
            [
                create(),
                envelope("issue", ["alice"], to="alice", quantity=asset(10)),
                envelope("approve", ["alice"], owner="alice", spender="dave", parent_id=5, amount=3),
                envelope(
                    "transferfrom",
                    ["dave"],
                    **{"owner": "dave", "from": "alice", "to": "carol", "assets": [asset(2)]},
                ),
            ],
            ACCOUNTS,
        )

        assert all(r.is_valid for r in results)
        assert self.processor.allowances.get_limits("alice", "dave") == {5: 1}

    def test_metadata_actions(self):
        results = self.processor.process_batch(
            [
                create(),
                envelope("setnotary", ["flon.ntoken"], notary="notary1", add=True),
                envelope("notarize", ["notary1"], notary="notary1", symbol_id=1),
                envelope("settokenuri", ["flon.ntoken"], symbol_id=1, url="ipfs://b"),
                envelope("setipowner", ["flon.ntoken"], symbol_id=1, owner="carol"),
            ],
            ACCOUNTS,
        )

        assert all(r.is_valid for r in results)
        token = self.processor.registry.get(1)
        assert token.notary == "notary1"
        assert token.token_uri == "ipfs://b"
        assert token.ip_owner == "carol"

    def test_database_error_rolls_back_and_raises(self):
        with patch.object(self.db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk full"))):
            with pytest.raises(OperationalError):
                self.processor.process_batch([create()], ACCOUNTS)

        assert self.processor.ledger.validator.get_token(1) is None


class TestActionBatch:
    def test_parses_batch(self):
        batch = ActionBatch.model_validate(
            {
                "accounts": ["alice", "bob"],
                "actions": [{"name": "setcheck", "authorization": ["flon.ntoken"], "data": {"check_creator": True}}],
            }
        )

        assert batch.accounts == ["alice", "bob"]
        assert batch.actions[0].name == "setcheck"

    def test_rejects_malformed_account_names(self):
        with pytest.raises(ValueError):
            ActionBatch.model_validate({"accounts": ["Alice"], "actions": []})

"""Tests for the restore confirmation gate."""

import pytest
from datetime import timedelta
from unittest.mock import patch

from sitedesk._utils import utc_now
from sitedesk.backup.confirmation import ConfirmationGate
from sitedesk.errors import ConfirmationError


def test_token_is_single_use():
    gate = ConfirmationGate()
    issued = gate.request("backup-1.json", "Deletes everything")

    assert issued.backup_name == "backup-1.json"
    assert issued.description == "Deletes everything"
    assert gate.consume(issued.token) == issued

    with pytest.raises(ConfirmationError, match="already used"):
        gate.consume(issued.token)


def test_unknown_token():
    with pytest.raises(ConfirmationError):
        ConfirmationGate().consume("forged")


def test_tokens_are_distinct():
    gate = ConfirmationGate()
    assert gate.request("a", "").token != gate.request("a", "").token


def test_expired_token():
    gate = ConfirmationGate(ttl_seconds=60)
    issued = gate.request("backup-1.json", "")
    later = utc_now() + timedelta(seconds=61)

    with patch("sitedesk.backup.confirmation.utc_now", return_value=later):
        with pytest.raises(ConfirmationError, match="expired"):
            gate.consume(issued.token)


def test_expired_tokens_are_pruned():
    gate = ConfirmationGate(ttl_seconds=60)
    old = gate.request("a", "")
    later = utc_now() + timedelta(seconds=61)

    with patch("sitedesk.backup.confirmation.utc_now", return_value=later):
        gate.request("b", "")

    assert old.token not in gate._pending

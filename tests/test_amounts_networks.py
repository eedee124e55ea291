# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation
"""Tests for amount conversion helpers, network lookup, and policy coercion."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from agent_pay.amounts import format_amount, from_minor_units, to_decimal, to_minor_units
from agent_pay.errors import AgentPayError, InvalidAmountError
from agent_pay.networks import NETWORK_NAMES, NETWORKS, resolve_network
from agent_pay.rules import usd
from agent_pay.types import PaymentPolicy


class TestToDecimal:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1.50", Decimal("1.50")),
            (" 2 ", Decimal("2")),
            (3, Decimal("3")),
            (0.1, Decimal("0.1")),
            (Decimal("0.000001"), Decimal("0.000001")),
        ],
    )
    def test_accepted_inputs(self, value, expected) -> None:
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", ["-1", -0.5, "nan", "-Infinity", "", False, None, [1]])
    def test_rejected_inputs(self, value) -> None:
        with pytest.raises(InvalidAmountError) as exc_info:
            to_decimal(value)
        assert exc_info.value.code == "INVALID_AMOUNT"
        assert isinstance(exc_info.value, AgentPayError)
        assert isinstance(exc_info.value, ValueError)


class TestMinorUnits:
    def test_to_minor_units_truncates_sub_micro_precision(self) -> None:
        assert to_minor_units("1.5") == 1_500_000
        assert to_minor_units("0.0000019") == 1

    def test_from_minor_units(self) -> None:
        assert from_minor_units("1500000") == Decimal("1.5")
        assert from_minor_units(1) == Decimal("0.000001")

    @pytest.mark.parametrize("raw", ["-1", "x", None])
    def test_from_minor_units_rejects_bad_input(self, raw) -> None:
        with pytest.raises(InvalidAmountError):
            from_minor_units(raw)

    def test_format_amount_has_six_decimals(self) -> None:
        assert format_amount("0.05") == "0.050000"
        assert format_amount(2) == "2.000000"


class TestUsd:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("0.5"), "$0.50"),
            (Decimal("10"), "$10.00"),
            (Decimal("9.999999"), "$9.999999"),
            (Decimal("1.230"), "$1.23"),
        ],
    )
    def test_formats_two_to_six_decimals(self, value, expected) -> None:
        assert usd(value) == expected


class TestNetworks:
    def test_every_network_name_has_an_entry(self) -> None:
        assert set(NETWORK_NAMES) == set(NETWORKS)

    def test_resolve_by_name(self) -> None:
        resolution = resolve_network("base")
        assert resolution.ok is True
        assert resolution.network.chain_id == 8453
        assert resolution.network.caip2_id == "eip155:8453"

    def test_resolve_by_caip2_id(self) -> None:
        resolution = resolve_network("eip155:84532")
        assert resolution.network.name == "baseSepolia"
        assert resolution.network.testnet is True

    def test_unknown_network_returns_error_instead_of_raising(self) -> None:
        resolution = resolve_network("solana")
        assert resolution.ok is False
        assert resolution.network is None
        assert resolution.error == "unknown_network"
        assert "solana" in resolution.detail


class TestPaymentPolicy:
    def test_monetary_fields_are_coerced_to_decimal(self) -> None:
        policy = PaymentPolicy(max_per_transaction=1, daily_limit=0.3, weekly_limit="5")
        assert policy.max_per_transaction == Decimal("1")
        assert policy.daily_limit == Decimal("0.3")
        assert policy.weekly_limit == Decimal("5")
        assert policy.monthly_limit is None

    def test_negative_limit_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PaymentPolicy(max_per_transaction="-1", daily_limit="10")

    def test_negative_velocity_limit_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PaymentPolicy(max_per_transaction="1", daily_limit="1", max_transactions_per_hour=-1)

    def test_recipient_lists_become_tuples(self) -> None:
        policy = PaymentPolicy(
            max_per_transaction="1", daily_limit="1", approved_recipients=["0xA", "0xB"]
        )
        assert policy.approved_recipients == ("0xA", "0xB")

    def test_policy_is_frozen(self) -> None:
        policy = PaymentPolicy(max_per_transaction="1", daily_limit="1")
        with pytest.raises(ValidationError):
            policy.daily_limit = Decimal("5")

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2026 MuVeraAI Corporation

"""
Supported settlement networks and their USDC contracts.

Lookups return a ``NetworkResolution`` rather than raising, so callers can
branch on ``resolution.error`` when a name comes from untrusted input.
"""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict

from agent_pay.types import NetworkName


class NetworkInfo(BaseModel):
    """Static description of one EVM network."""

    model_config = ConfigDict(frozen=True)

    name: NetworkName
    caip2_id: str
    chain_id: int
    usdc_address: str
    testnet: bool = False


NETWORKS: dict[str, NetworkInfo] = {
    info.name: info
    for info in (
        NetworkInfo(
            name="base",
            caip2_id="eip155:8453",
            chain_id=8453,
            usdc_address="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
        ),
        NetworkInfo(
            name="ethereum",
            caip2_id="eip155:1",
            chain_id=1,
            usdc_address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
        ),
        NetworkInfo(
            name="arbitrum",
            caip2_id="eip155:42161",
            chain_id=42161,
            usdc_address="0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
        ),
        NetworkInfo(
            name="optimism",
            caip2_id="eip155:10",
            chain_id=10,
            usdc_address="0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
        ),
        NetworkInfo(
            name="polygon",
            caip2_id="eip155:137",
            chain_id=137,
            usdc_address="0x3c499c542cEF5E3811e1192ce70d8cC03d5c3359",
        ),
        NetworkInfo(
            name="baseSepolia",
            caip2_id="eip155:84532",
            chain_id=84532,
            usdc_address="0x036CbD53842c5426634e7929541eC2318f3dCF7e",
            testnet=True,
        ),
    )
}

NETWORK_NAMES: tuple[str, ...] = get_args(NetworkName)

NetworkError = Literal["unknown_network"]


class NetworkResolution(BaseModel):
    """Result of ``resolve_network``. Exactly one of the two fields is set."""

    model_config = ConfigDict(frozen=True)

    network: NetworkInfo | None = None
    error: NetworkError | None = None
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.network is not None


def resolve_network(name: str) -> NetworkResolution:
    """
    Look up a network by name (``"base"``) or CAIP-2 id (``"eip155:8453"``).
    """
    info = NETWORKS.get(name)
    if info is None:
        info = next((n for n in NETWORKS.values() if n.caip2_id == name), None)
    if info is None:
        return NetworkResolution(
            error="unknown_network",
            detail=f"Unsupported network {name!r}. Supported: {', '.join(NETWORK_NAMES)}.",
        )
    return NetworkResolution(network=info)

# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import os
from typing import Optional

from eth_account import Account
from pydantic import BaseModel, Field

from request_network_client import EthereumPrivateKeySignatureProvider, RequestNetworkClient

# Sepolia contract addresses
FAU_TOKEN_ADDRESS = "0x370DE27fdb7D1Ff1e1BaA7D11c5820a324Cf623C"
ERC20_FEE_PROXY_ADDRESS = "0x399F5EE127ce7432E4921a61b8CF52b0af52cbfE"
SEPOLIA_GATEWAY_URL = "https://sepolia.gateway.request.network/"

# 1 FAU (18 decimals)
EXPECTED_AMOUNT = "1000000000000000000"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


class InvoiceRuntimeConfig(BaseModel):
    payee_private_key: Optional[str] = Field(default_factory=lambda: os.getenv("PAYEE_PRIVATE_KEY"))
    gateway_url: str = Field(default_factory=lambda: os.getenv("REQUEST_GATEWAY_URL", SEPOLIA_GATEWAY_URL))
    network: str = Field(default_factory=lambda: os.getenv("INVOICE_NETWORK", "sepolia"))
    token_address: str = Field(default_factory=lambda: os.getenv("INVOICE_TOKEN_ADDRESS", FAU_TOKEN_ADDRESS))
    fee_proxy_address: str = Field(
        default_factory=lambda: os.getenv("INVOICE_FEE_PROXY_ADDRESS", ERC20_FEE_PROXY_ADDRESS)
    )
    timeout_s: float = Field(default_factory=lambda: _env_float("REQUEST_TIMEOUT_S", "15"))
    # 0 disables the timeout and waits for the node indefinitely
    confirmation_timeout_s: float = Field(default_factory=lambda: _env_float("CONFIRMATION_TIMEOUT_S", "600"))
    confirmation_poll_s: float = Field(default_factory=lambda: _env_float("CONFIRMATION_POLL_S", "3"))

    @property
    def confirmation_timeout(self) -> Optional[float]:
        return self.confirmation_timeout_s if self.confirmation_timeout_s > 0 else None

    @property
    def payee_address(self) -> str:
        if not self.payee_private_key:
            raise ValueError("PAYEE_PRIVATE_KEY is not configured")
        return Account.from_key(self.payee_private_key).address


def get_invoice_cfg() -> InvoiceRuntimeConfig:
    return InvoiceRuntimeConfig()


def build_request_client(cfg: InvoiceRuntimeConfig) -> RequestNetworkClient:
    provider = None
    if cfg.payee_private_key:
        provider = EthereumPrivateKeySignatureProvider(cfg.payee_private_key)
    return RequestNetworkClient(cfg.gateway_url, provider, timeout_s=cfg.timeout_s)


def get_request_client() -> RequestNetworkClient:
    # Replaced through app.dependency_overrides by the application factory
    raise RuntimeError("request client not configured")

# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
"""Wire types of the Request Network request-logic layer.

Field names follow the camelCase spelling used on the wire so that models
round-trip through ``model_dump()`` without aliases.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CurrencyType(str, Enum):
    ETH = "ETH"
    ERC20 = "ERC20"
    ERC777 = "ERC777"
    ISO4217 = "ISO4217"


class IdentityType(str, Enum):
    ETHEREUM_ADDRESS = "ethereumAddress"
    ETHEREUM_SMART_CONTRACT = "ethereumSmartContract"


class SignatureMethod(str, Enum):
    ECDSA = "ecdsa"
    ECDSA_ETHEREUM = "ecdsa-ethereum"


class ExtensionId(str, Enum):
    ERC20_FEE_PROXY_CONTRACT = "pn-erc20-fee-proxy-contract"
    ERC20_PROXY_CONTRACT = "pn-erc20-proxy-contract"
    ETH_FEE_PROXY_CONTRACT = "pn-eth-fee-proxy-contract"
    ETH_INPUT_DATA = "pn-eth-input-data"
    ANY_TO_ERC20_PROXY = "pn-any-to-erc20-proxy"
    CONTENT_DATA = "content-data"

    @property
    def is_payment_network(self) -> bool:
        return self.value.startswith("pn-")


# Versions written by request-client.js for newly created requests
EXTENSION_VERSIONS: Dict[ExtensionId, str] = {
    ExtensionId.ERC20_FEE_PROXY_CONTRACT: "0.2.0",
    ExtensionId.ERC20_PROXY_CONTRACT: "0.1.0",
    ExtensionId.ETH_FEE_PROXY_CONTRACT: "0.2.0",
    ExtensionId.ETH_INPUT_DATA: "0.3.0",
    ExtensionId.ANY_TO_ERC20_PROXY: "0.1.0",
    ExtensionId.CONTENT_DATA: "0.1.0",
}

REQUEST_LOGIC_VERSION = "2.0.3"


class RequestState(str, Enum):
    pending = "pending"
    created = "created"
    accepted = "accepted"
    canceled = "canceled"


class Identity(BaseModel):
    type: IdentityType = IdentityType.ETHEREUM_ADDRESS
    value: str

    def same_as(self, other: Optional["Identity"]) -> bool:
        return other is not None and self.type == other.type and self.value.lower() == other.value.lower()


class Currency(BaseModel):
    type: CurrencyType
    value: str
    network: Optional[str] = None


class RequestInfo(BaseModel):
    currency: Currency
    expectedAmount: str
    payee: Optional[Identity] = None
    payer: Optional[Identity] = None
    timestamp: Optional[int] = None
    nonce: Optional[int] = None


class PaymentNetworkCreateParameters(BaseModel):
    id: ExtensionId
    parameters: Dict[str, Any] = Field(default_factory=dict)


class CreateRequestParameters(BaseModel):
    requestInfo: RequestInfo
    signer: Identity
    paymentNetwork: Optional[PaymentNetworkCreateParameters] = None
    contentData: Optional[Dict[str, Any]] = None
    topics: List[str] = Field(default_factory=list)


class ExtensionState(BaseModel):
    type: str
    id: str
    version: str
    events: List[Dict[str, Any]] = Field(default_factory=list)
    values: Dict[str, Any] = Field(default_factory=dict)


class RequestData(BaseModel):
    requestId: str
    creator: Identity
    currency: Currency
    expectedAmount: str
    state: RequestState
    version: str = REQUEST_LOGIC_VERSION
    payee: Optional[Identity] = None
    payer: Optional[Identity] = None
    timestamp: Optional[int] = None
    nonce: Optional[int] = None
    extensions: Dict[str, ExtensionState] = Field(default_factory=dict)
    contentData: Optional[Dict[str, Any]] = None
    events: List[Dict[str, Any]] = Field(default_factory=list)
    pending: bool = False

    def payment_network(self, kind: ExtensionId) -> Optional[ExtensionState]:
        """Return the extension state for a payment-network kind, or None."""
        if not kind.is_payment_network:
            raise ValueError(f"{kind.value} is not a payment network")
        return self.extensions.get(kind.value)

# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
"""Payment parameters for the ERC20 fee-proxy contract.

The payment reference commits to (requestId, salt, payer, amount) so that the
proxy's TransferWithReferenceAndFee event can be matched back to a request.
"""
from __future__ import annotations

from typing import List

from eth_abi import encode
from eth_utils import is_checksum_address
from pydantic import BaseModel
from web3 import Web3

from request_network_client import ExtensionId, RequestData

from .config import InvoiceRuntimeConfig

PAYMENT_TYPES: List[str] = ["string", "string", "address", "uint256"]


class PaymentNetworkMissingError(Exception):
    pass


class PaymentResolution(BaseModel):
    tokenAddress: str
    paymentProxyAddress: str
    expectedAmount: str
    paymentReference: str
    paymentData: str


def _payer_address(payer_address: str) -> str:
    # Mixed case means the caller supplied an EIP-55 checksum; it must be right
    h = payer_address[2:] if payer_address.startswith("0x") else payer_address
    if h != h.lower() and h != h.upper() and not is_checksum_address(payer_address):
        raise ValueError("bad address checksum")
    return Web3.to_checksum_address(payer_address)


def compute_payment_reference(request_id: str, salt: str, payer_address: str, amount: int) -> str:
    payer = _payer_address(payer_address)
    digest = Web3.solidity_keccak(PAYMENT_TYPES, [request_id, salt, payer, int(amount)])
    return "0x" + bytes(digest).hex()


def encode_payment_data(request_id: str, salt: str, payer_address: str, amount: int) -> str:
    payer = _payer_address(payer_address)
    return "0x" + encode(PAYMENT_TYPES, [request_id, salt, payer, int(amount)]).hex()


def resolve_payment(data: RequestData, payer_address: str, cfg: InvoiceRuntimeConfig) -> PaymentResolution:
    pn = data.payment_network(ExtensionId.ERC20_FEE_PROXY_CONTRACT)
    if pn is None:
        raise PaymentNetworkMissingError("Payment network not configured for this request")
    salt = pn.values.get("salt")
    if not salt:
        raise PaymentNetworkMissingError("Payment network has no salt for this request")
    amount = int(data.expectedAmount)
    return PaymentResolution(
        tokenAddress=cfg.token_address,
        paymentProxyAddress=cfg.fee_proxy_address,
        expectedAmount=data.expectedAmount,
        paymentReference=compute_payment_reference(data.requestId, salt, payer_address, amount),
        paymentData=encode_payment_data(data.requestId, salt, payer_address, amount),
    )

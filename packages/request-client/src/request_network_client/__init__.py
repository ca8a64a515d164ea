# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
from .client import Request, RequestNetworkClient, compute_request_data
from .crypto import EthereumPrivateKeySignatureProvider, normalize, normalize_keccak256_hash, serialize_hash
from .errors import (
    ConfirmationTimeoutError,
    GatewayError,
    InvalidRequestError,
    RequestNetworkError,
    RequestNotFoundError,
    SignatureError,
)
from .gateway import GatewayClient
from .models import (
    CreateRequestParameters,
    Currency,
    CurrencyType,
    ExtensionId,
    ExtensionState,
    Identity,
    IdentityType,
    PaymentNetworkCreateParameters,
    RequestData,
    RequestInfo,
    RequestState,
    SignatureMethod,
)

__all__ = [
    "RequestNetworkClient",
    "Request",
    "compute_request_data",
    "GatewayClient",
    "EthereumPrivateKeySignatureProvider",
    "normalize",
    "normalize_keccak256_hash",
    "serialize_hash",
    "RequestNetworkError",
    "GatewayError",
    "RequestNotFoundError",
    "ConfirmationTimeoutError",
    "SignatureError",
    "InvalidRequestError",
    "CreateRequestParameters",
    "Currency",
    "CurrencyType",
    "ExtensionId",
    "ExtensionState",
    "Identity",
    "IdentityType",
    "PaymentNetworkCreateParameters",
    "RequestData",
    "RequestInfo",
    "RequestState",
    "SignatureMethod",
]

# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
"""Invoice API

FastAPI router that creates Request Network invoices and resolves the
fee-proxy payment parameters for them.

Usage:
    from invoice_api import router, get_invoice_cfg, get_request_client

    app = FastAPI()
    app.dependency_overrides[get_request_client] = lambda: client
    app.include_router(router)
"""

from .config import (
    ERC20_FEE_PROXY_ADDRESS,
    EXPECTED_AMOUNT,
    FAU_TOKEN_ADDRESS,
    InvoiceRuntimeConfig,
    build_request_client,
    get_invoice_cfg,
    get_request_client,
)
from .invoices import build_invoice_parameters, create_invoice
from .payments import (
    PaymentNetworkMissingError,
    PaymentResolution,
    compute_payment_reference,
    encode_payment_data,
    resolve_payment,
)
from .routes import router

__version__ = "0.1.0"

__all__ = [
    "router",
    "InvoiceRuntimeConfig",
    "get_invoice_cfg",
    "get_request_client",
    "build_request_client",
    "FAU_TOKEN_ADDRESS",
    "ERC20_FEE_PROXY_ADDRESS",
    "EXPECTED_AMOUNT",
    "build_invoice_parameters",
    "create_invoice",
    "PaymentNetworkMissingError",
    "PaymentResolution",
    "compute_payment_reference",
    "encode_payment_data",
    "resolve_payment",
]

# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

from request_network_client import (
    CreateRequestParameters,
    Currency,
    CurrencyType,
    ExtensionId,
    Identity,
    IdentityType,
    PaymentNetworkCreateParameters,
    RequestData,
    RequestInfo,
    RequestNetworkClient,
)

from .config import EXPECTED_AMOUNT, ZERO_ADDRESS, InvoiceRuntimeConfig

logger = logging.getLogger(__name__)


def build_invoice_parameters(
    cfg: InvoiceRuntimeConfig,
    payer_address: str,
    reason: Optional[str],
    due_date: Optional[str],
) -> CreateRequestParameters:
    payee = Identity(type=IdentityType.ETHEREUM_ADDRESS, value=cfg.payee_address)
    return CreateRequestParameters(
        requestInfo=RequestInfo(
            currency=Currency(type=CurrencyType.ERC20, value=cfg.token_address, network=cfg.network),
            expectedAmount=EXPECTED_AMOUNT,
            payee=payee,
            payer=Identity(type=IdentityType.ETHEREUM_ADDRESS, value=payer_address),
            timestamp=int(time.time()),
        ),
        paymentNetwork=PaymentNetworkCreateParameters(
            id=ExtensionId.ERC20_FEE_PROXY_CONTRACT,
            parameters={
                "paymentAddress": payee.value,
                "feeAddress": ZERO_ADDRESS,
                "feeAmount": "0",
            },
        ),
        contentData={k: v for k, v in (("reason", reason), ("dueDate", due_date)) if v is not None},
        signer=payee,
    )


async def create_invoice(
    client: RequestNetworkClient,
    cfg: InvoiceRuntimeConfig,
    payer_address: str,
    reason: Optional[str],
    due_date: Optional[str],
) -> Dict[str, Any]:
    params = build_invoice_parameters(cfg, payer_address, reason, due_date)
    request = await client.create_request(params)
    data: RequestData = await request.wait_for_confirmation(
        timeout=cfg.confirmation_timeout, poll_interval=cfg.confirmation_poll_s
    )
    logger.info("invoice %s confirmed for payer %s", data.requestId, payer_address)
    return {
        "requestId": data.requestId,
        "payeeIdentity": data.creator.value,
        "expectedAmount": params.requestInfo.expectedAmount,
        "contentData": data.contentData,
    }

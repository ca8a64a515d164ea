# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from request_network_client import RequestNetworkClient

from .config import InvoiceRuntimeConfig, get_invoice_cfg, get_request_client
from .invoices import create_invoice
from .payments import PaymentResolution, resolve_payment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invoices"])


# -------------------------------
# Models
# -------------------------------


class CreateInvoiceRequest(BaseModel):
    address: str
    reason: Optional[str] = None
    dueDate: Optional[str] = None


class CreateInvoiceResponse(BaseModel):
    requestId: str
    payeeIdentity: str
    expectedAmount: str
    contentData: Optional[Dict[str, Any]] = None


class ProcessPaymentRequest(BaseModel):
    requestId: str
    payerAddress: str


class ErrorResponse(BaseModel):
    error: str
    details: str


def _error_response(error: str, e: Exception, req_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": error, "details": str(e)},
        headers={"X-Request-ID": req_id},
    )


@router.post(
    "/create-invoice",
    response_model=CreateInvoiceResponse,
    responses={500: {"model": ErrorResponse}},
)
async def create_invoice_route(
    body: CreateInvoiceRequest,
    response: Response,
    cfg: InvoiceRuntimeConfig = Depends(get_invoice_cfg),
    client: RequestNetworkClient = Depends(get_request_client),
):
    req_id = uuid.uuid4().hex
    response.headers["X-Request-ID"] = req_id
    try:
        result = await create_invoice(client, cfg, body.address, body.reason, body.dueDate)
    except Exception as e:
        logger.exception(f"[{req_id}] Error creating invoice: {e}")
        return _error_response("Failed to create invoice", e, req_id)
    logger.info(f"[{req_id}] Created invoice {result['requestId']}")
    return CreateInvoiceResponse(**result)


@router.post(
    "/process-payment",
    response_model=PaymentResolution,
    responses={500: {"model": ErrorResponse}},
)
async def process_payment_route(
    body: ProcessPaymentRequest,
    response: Response,
    cfg: InvoiceRuntimeConfig = Depends(get_invoice_cfg),
    client: RequestNetworkClient = Depends(get_request_client),
):
    req_id = uuid.uuid4().hex
    response.headers["X-Request-ID"] = req_id
    try:
        logger.info(f"[{req_id}] Processing payment for request: {body.requestId}")
        request = await client.from_request_id(body.requestId)
        data = await request.get_data()
        logger.debug(f"[{req_id}] Request data: {data.model_dump_json()}")
        return resolve_payment(data, body.payerAddress, cfg)
    except Exception as e:
        logger.exception(f"[{req_id}] Error processing payment: {e}")
        return _error_response("Failed to process payment", e, req_id)

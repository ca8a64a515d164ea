#!/usr/bin/env python3
# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
"""
Standalone runner for the invoice API.

Env:
  - PAYEE_PRIVATE_KEY (required to create invoices)
  - INVOICE_PORT (default: 3002)
  - INVOICE_HOST (default: 0.0.0.0)
  - REQUEST_GATEWAY_URL (default: https://sepolia.gateway.request.network/)
  - CONFIRMATION_TIMEOUT_S (default: 600, 0 waits forever)
"""

import logging
import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

# Add package sources to Python path
repo_root = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, repo_root)
sys.path.insert(0, os.path.join(repo_root, 'server', 'src'))
sys.path.insert(0, os.path.join(repo_root, 'packages', 'request-client', 'src'))

# Load .env BEFORE reading configuration
from dotenv import load_dotenv  # type: ignore
load_dotenv()

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from invoice_api import (
    InvoiceRuntimeConfig,
    build_request_client,
    get_invoice_cfg,
    get_request_client,
    router,
)
from request_network_client import RequestNetworkClient


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("invoice_server")


def build_app(
    cfg: Optional[InvoiceRuntimeConfig] = None,
    client: Optional[RequestNetworkClient] = None,
) -> FastAPI:
    cfg = cfg or InvoiceRuntimeConfig()
    client = client or build_request_client(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await client.aclose()

    app = FastAPI(
        title="Request Network Invoice API",
        description="Creates ERC20 fee-proxy invoices and resolves their payment parameters",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    # Wire the process-wide config and client via dependencies
    app.dependency_overrides[get_invoice_cfg] = lambda: cfg
    app.dependency_overrides[get_request_client] = lambda: client

    @app.get("/health")
    async def health(
        cfg: InvoiceRuntimeConfig = Depends(get_invoice_cfg),
        rn_client: RequestNetworkClient = Depends(get_request_client),
    ) -> dict:
        try:
            await rn_client.gateway.get_information()
            gateway_status = "ok"
        except Exception as e:
            logger.warning("gateway health check failed: %s", e)
            gateway_status = "unreachable"
        return {
            "status": "ok",
            "gateway_status": gateway_status,
            "time": datetime.now(timezone.utc).isoformat(),
            "gateway": cfg.gateway_url,
            "network": cfg.network,
        }

    app.include_router(router)

    logger.info("Invoice API initialized (gateway=%s)", cfg.gateway_url)
    return app


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("INVOICE_HOST", "0.0.0.0")
    port = int(os.getenv("INVOICE_PORT", "3002"))
    uvicorn.run(build_app(), host=host, port=port, log_level="info")

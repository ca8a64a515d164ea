# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
import os
import sys
from typing import Any, Dict, Optional
from unittest.mock import Mock

import pytest


def _add_project_paths_to_syspath() -> None:
    root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    for path in (
        root,
        os.path.join(root, "server", "src"),
        os.path.join(root, "packages", "request-client", "src"),
        os.path.join(root, "scripts"),
    ):
        if path not in sys.path:
            sys.path.insert(0, path)


_add_project_paths_to_syspath()


PAYEE_PRIVATE_KEY = "0x" + "a" * 64
PAYER_ADDRESS = "0x" + "b" * 40


@pytest.fixture
def test_env(monkeypatch) -> None:
    """Set up test environment variables."""
    monkeypatch.setenv("PAYEE_PRIVATE_KEY", PAYEE_PRIVATE_KEY)
    monkeypatch.setenv("REQUEST_GATEWAY_URL", "http://gateway.test")
    monkeypatch.setenv("CONFIRMATION_TIMEOUT_S", "5")
    monkeypatch.setenv("CONFIRMATION_POLL_S", "0")


@pytest.fixture
def payee_private_key() -> str:
    return PAYEE_PRIVATE_KEY


@pytest.fixture
def payer_address() -> str:
    return PAYER_ADDRESS


@pytest.fixture
def invoice_cfg(test_env):
    from invoice_api import InvoiceRuntimeConfig

    return InvoiceRuntimeConfig()


def make_response(status_code: int = 200, body: Optional[Dict[str, Any]] = None) -> Mock:
    """Mock httpx.Response with a JSON body."""
    response = Mock()
    response.status_code = status_code
    response.headers = {"content-type": "application/json; charset=utf-8"}
    response.json.return_value = body or {}
    response.text = str(body or {})
    return response


@pytest.fixture
def sample_request_data() -> dict:
    """Confirmed fee-proxy request as returned by get_data()."""
    return {
        "requestId": "01" + "c" * 64,
        "creator": {"type": "ethereumAddress", "value": "0x8fd379246834eac74B8419FfdA202CF8051F7A03"},
        "payee": {"type": "ethereumAddress", "value": "0x8fd379246834eac74B8419FfdA202CF8051F7A03"},
        "payer": {"type": "ethereumAddress", "value": PAYER_ADDRESS},
        "currency": {
            "type": "ERC20",
            "value": "0x370DE27fdb7D1Ff1e1BaA7D11c5820a324Cf623C",
            "network": "sepolia",
        },
        "expectedAmount": "1000000000000000000",
        "state": "created",
        "timestamp": 1735689600,
        "extensions": {
            "pn-erc20-fee-proxy-contract": {
                "type": "payment-network",
                "id": "pn-erc20-fee-proxy-contract",
                "version": "0.2.0",
                "values": {
                    "paymentAddress": "0x8fd379246834eac74B8419FfdA202CF8051F7A03",
                    "feeAddress": "0x0000000000000000000000000000000000000000",
                    "feeAmount": "0",
                    "salt": "ea3bc7caf64110ca",
                },
            },
            "content-data": {
                "type": "content-data",
                "id": "content-data",
                "version": "0.1.0",
                "values": {"content": {"reason": "Invoice #1", "dueDate": "2025-01-01"}},
            },
        },
        "contentData": {"reason": "Invoice #1", "dueDate": "2025-01-01"},
    }

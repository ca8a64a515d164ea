# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
"""
Test the /create-invoice and /process-payment endpoints.
"""
import re
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport

PAYMENT_REFERENCE = re.compile(r"^0x[0-9a-f]{64}$")


@pytest.fixture
def request_data(sample_request_data):
    from request_network_client import RequestData

    return RequestData(**sample_request_data)


@pytest.fixture
def mock_rn_client(request_data) -> Mock:
    """Request client double returning sample_request_data."""
    request = Mock()
    request.request_id = request_data.requestId
    request.wait_for_confirmation = AsyncMock(return_value=request_data)
    request.get_data = AsyncMock(return_value=request_data)

    client = Mock()
    client.create_request = AsyncMock(return_value=request)
    client.from_request_id = AsyncMock(return_value=request)
    client.aclose = AsyncMock()
    client.gateway.get_information = AsyncMock(return_value={"status": "ok"})
    return client


@pytest.fixture
def client(invoice_cfg, mock_rn_client) -> TestClient:
    from run_invoice_server import build_app

    return TestClient(build_app(invoice_cfg, mock_rn_client))


class TestCreateInvoice:
    def test_create_invoice(self, client: TestClient, mock_rn_client, payer_address):
        response = client.post(
            "/create-invoice",
            json={"address": payer_address, "reason": "Invoice #1", "dueDate": "2025-01-01"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["requestId"] == "01" + "c" * 64
        assert data["expectedAmount"] == "1000000000000000000"
        assert data["payeeIdentity"] == "0x8fd379246834eac74B8419FfdA202CF8051F7A03"
        assert data["contentData"] == {"reason": "Invoice #1", "dueDate": "2025-01-01"}
        assert "X-Request-ID" in response.headers

        params = mock_rn_client.create_request.call_args.args[0]
        assert params.requestInfo.payer.value == payer_address
        assert params.requestInfo.currency.network == "sepolia"
        assert params.paymentNetwork.id.value == "pn-erc20-fee-proxy-contract"
        assert params.paymentNetwork.parameters["feeAmount"] == "0"
        assert params.paymentNetwork.parameters["paymentAddress"] == params.signer.value

    def test_create_invoice_waits_with_configured_timeout(self, client: TestClient, mock_rn_client, payer_address):
        client.post("/create-invoice", json={"address": payer_address, "reason": "r", "dueDate": "d"})

        request = mock_rn_client.create_request.return_value
        request.wait_for_confirmation.assert_awaited_once_with(timeout=5.0, poll_interval=0.0)

    def test_omitted_content_fields_are_not_stored(self, client: TestClient, mock_rn_client, payer_address):
        response = client.post("/create-invoice", json={"address": payer_address, "reason": "Invoice #2"})

        assert response.status_code == 200
        params = mock_rn_client.create_request.call_args.args[0]
        assert params.contentData == {"reason": "Invoice #2"}

    def test_create_invoice_gateway_failure(self, client: TestClient, mock_rn_client, payer_address):
        from request_network_client import GatewayError

        mock_rn_client.create_request.side_effect = GatewayError("/persistTransaction unreachable")

        response = client.post(
            "/create-invoice",
            json={"address": payer_address, "reason": "Invoice #1", "dueDate": "2025-01-01"},
        )

        assert response.status_code == 500
        assert response.json() == {
            "error": "Failed to create invoice",
            "details": "/persistTransaction unreachable",
        }

    def test_create_invoice_without_payee_key(self, client: TestClient, invoice_cfg, payer_address):
        invoice_cfg.payee_private_key = None

        response = client.post("/create-invoice", json={"address": payer_address})

        assert response.status_code == 500
        assert "PAYEE_PRIVATE_KEY" in response.json()["details"]


class TestProcessPayment:
    def test_process_payment(self, client: TestClient, mock_rn_client, payer_address):
        from invoice_api import ERC20_FEE_PROXY_ADDRESS, FAU_TOKEN_ADDRESS

        response = client.post(
            "/process-payment",
            json={"requestId": "01" + "c" * 64, "payerAddress": payer_address},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tokenAddress"] == FAU_TOKEN_ADDRESS
        assert data["paymentProxyAddress"] == ERC20_FEE_PROXY_ADDRESS
        assert data["expectedAmount"] == "1000000000000000000"
        assert PAYMENT_REFERENCE.match(data["paymentReference"])
        assert data["paymentData"].startswith("0x")
        mock_rn_client.from_request_id.assert_awaited_once_with("01" + "c" * 64)

    def test_process_payment_is_deterministic(self, client: TestClient, payer_address):
        body = {"requestId": "01" + "c" * 64, "payerAddress": payer_address}
        first = client.post("/process-payment", json=body).json()
        second = client.post("/process-payment", json=body).json()
        assert first == second

    def test_process_payment_not_found(self, client: TestClient, mock_rn_client, payer_address):
        from request_network_client import RequestNotFoundError

        mock_rn_client.from_request_id.side_effect = RequestNotFoundError("Request not found: 0xdeadbeef")

        response = client.post(
            "/process-payment",
            json={"requestId": "0xdeadbeef", "payerAddress": payer_address},
        )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Failed to process payment"
        assert "not found" in data["details"]
        assert "paymentReference" not in data

    def test_process_payment_missing_payment_network(self, client: TestClient, request_data, payer_address):
        request_data.extensions.pop("pn-erc20-fee-proxy-contract")

        response = client.post(
            "/process-payment",
            json={"requestId": request_data.requestId, "payerAddress": payer_address},
        )

        assert response.status_code == 500
        assert response.json()["details"] == "Payment network not configured for this request"

    def test_process_payment_invalid_payer(self, client: TestClient):
        response = client.post(
            "/process-payment",
            json={"requestId": "01" + "c" * 64, "payerAddress": "0xPayer"},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process payment"

    def test_process_payment_bad_checksum(self, client: TestClient):
        response = client.post(
            "/process-payment",
            json={"requestId": "01" + "c" * 64, "payerAddress": "0xAbCdEf0000000000000000000000000000000000"},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process payment", "details": "bad address checksum"}

    def test_missing_field_is_rejected(self, client: TestClient):
        response = client.post("/process-payment", json={"requestId": "01" + "c" * 64})
        assert response.status_code == 422


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["network"] == "sepolia"
    assert data["gateway_status"] == "ok"


class TestEndToEnd:
    """Create then pay an invoice against an in-memory gateway."""

    @pytest.fixture
    def e2e_client(self, invoice_cfg, payee_private_key):
        from mock_gateway import create_app
        from request_network_client import EthereumPrivateKeySignatureProvider, RequestNetworkClient
        from run_invoice_server import build_app

        http = httpx.AsyncClient(transport=ASGITransport(app=create_app()))
        rn_client = RequestNetworkClient(
            invoice_cfg.gateway_url, EthereumPrivateKeySignatureProvider(payee_private_key), http=http
        )
        with TestClient(build_app(invoice_cfg, rn_client)) as c:
            yield c

    def test_create_then_process_payment(self, e2e_client: TestClient, payer_address, payee_private_key):
        from eth_account import Account

        created = e2e_client.post(
            "/create-invoice",
            json={"address": payer_address, "reason": "Invoice #1", "dueDate": "2025-01-01"},
        )
        assert created.status_code == 200
        invoice = created.json()
        assert invoice["requestId"]
        assert invoice["payeeIdentity"] == Account.from_key(payee_private_key).address
        assert invoice["contentData"] == {"reason": "Invoice #1", "dueDate": "2025-01-01"}

        paid = e2e_client.post(
            "/process-payment",
            json={"requestId": invoice["requestId"], "payerAddress": payer_address},
        )
        assert paid.status_code == 200
        payment = paid.json()
        assert payment["expectedAmount"] == invoice["expectedAmount"]
        assert PAYMENT_REFERENCE.match(payment["paymentReference"])

    def test_unknown_request_id(self, e2e_client: TestClient, payer_address):
        response = e2e_client.post(
            "/process-payment",
            json={"requestId": "0xdeadbeef", "payerAddress": payer_address},
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to process payment"

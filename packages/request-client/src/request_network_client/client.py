# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
"""Async request-logic client over a Request Network gateway.

Creating a request signs a ``create`` action, derives the request id from it
and persists it as a clear transaction on the channel named after that id.
Reading a request replays every action found on the channel.
"""
from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from .crypto import (
    EthereumPrivateKeySignatureProvider,
    generate_salt,
    normalize_keccak256_hash,
    recover_signer,
    serialize_hash,
)
from .errors import ConfirmationTimeoutError, InvalidRequestError, RequestNotFoundError
from .gateway import GatewayClient
from .models import (
    EXTENSION_VERSIONS,
    REQUEST_LOGIC_VERSION,
    CreateRequestParameters,
    Currency,
    ExtensionId,
    ExtensionState,
    Identity,
    RequestData,
    RequestState,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_S = 3.0


def _now() -> int:
    return int(time.time())


def _identity_topic(identity: Identity) -> str:
    return serialize_hash(normalize_keccak256_hash(identity.model_dump(mode="json")))


def _extensions_data(params: CreateRequestParameters) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    pn = params.paymentNetwork
    if pn is not None:
        if not pn.id.is_payment_network:
            raise InvalidRequestError(f"{pn.id.value} is not a payment network")
        parameters = dict(pn.parameters)
        parameters.setdefault("salt", generate_salt())
        out.append(
            {
                "action": "create",
                "id": pn.id.value,
                "parameters": parameters,
                "version": EXTENSION_VERSIONS[pn.id],
            }
        )
    if params.contentData is not None:
        out.append(
            {
                "action": "create",
                "id": ExtensionId.CONTENT_DATA.value,
                "parameters": {"content": params.contentData},
                "version": EXTENSION_VERSIONS[ExtensionId.CONTENT_DATA],
            }
        )
    return out


def build_create_action(params: CreateRequestParameters) -> Dict[str, Any]:
    info = params.requestInfo
    if info.payee is None and info.payer is None:
        raise InvalidRequestError("payee or payer identity required")
    if not info.expectedAmount.isdigit():
        raise InvalidRequestError("expectedAmount must be a positive integer string")
    parameters: Dict[str, Any] = {
        "currency": info.currency.model_dump(mode="json", exclude_none=True),
        "expectedAmount": info.expectedAmount,
        "timestamp": info.timestamp if info.timestamp is not None else _now(),
        "extensionsData": _extensions_data(params),
    }
    if info.payee is not None:
        parameters["payee"] = info.payee.model_dump(mode="json")
    if info.payer is not None:
        parameters["payer"] = info.payer.model_dump(mode="json")
    if info.nonce is not None:
        parameters["nonce"] = info.nonce
    return {"name": "create", "parameters": parameters, "version": REQUEST_LOGIC_VERSION}


def compute_request_id(signed_action: Dict[str, Any]) -> str:
    return serialize_hash(normalize_keccak256_hash(signed_action))


# -------------------------------
# Action replay
# -------------------------------


def _apply_extensions(data: RequestData, extensions_data: List[Dict[str, Any]], timestamp: Optional[int]) -> None:
    for ext in extensions_data or []:
        ext_id = ext.get("id")
        action = ext.get("action")
        parameters = ext.get("parameters") or {}
        event = {"name": action, "parameters": parameters, "timestamp": timestamp}
        if action == "create":
            kind = "content-data" if ext_id == ExtensionId.CONTENT_DATA.value else "payment-network"
            data.extensions[ext_id] = ExtensionState(
                type=kind,
                id=ext_id,
                version=str(ext.get("version", "")),
                events=[event],
                values=dict(parameters),
            )
            if ext_id == ExtensionId.CONTENT_DATA.value:
                data.contentData = parameters.get("content")
            continue
        state = data.extensions.get(ext_id)
        if state is None:
            raise InvalidRequestError(f"extension {ext_id} updated before creation")
        state.values.update(parameters)
        state.events.append(event)


def _from_create(request_id: str, signed: Dict[str, Any], timestamp: Optional[int]) -> RequestData:
    action = signed.get("data") or {}
    params = action.get("parameters") or {}
    creator = recover_signer(signed)
    try:
        payee = Identity(**params["payee"]) if params.get("payee") else None
        payer = Identity(**params["payer"]) if params.get("payer") else None
        data = RequestData(
            requestId=request_id,
            creator=creator,
            currency=Currency(**params["currency"]),
            expectedAmount=str(params["expectedAmount"]),
            state=RequestState.created,
            version=str(action.get("version", REQUEST_LOGIC_VERSION)),
            payee=payee,
            payer=payer,
            timestamp=params.get("timestamp"),
            nonce=params.get("nonce"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidRequestError(f"malformed create action: {e}") from e
    if not (creator.same_as(payee) or creator.same_as(payer)):
        raise InvalidRequestError("create action must be signed by the payee or the payer")
    _apply_extensions(data, params.get("extensionsData") or [], timestamp)
    return data


def _apply_action(data: RequestData, signed: Dict[str, Any], timestamp: Optional[int]) -> None:
    action = signed.get("data") or {}
    name = action.get("name")
    params = action.get("parameters") or {}
    if name == "accept":
        if not recover_signer(signed).same_as(data.payer):
            raise InvalidRequestError("accept must be signed by the payer")
        data.state = RequestState.accepted
    elif name == "cancel":
        data.state = RequestState.canceled
    elif name in ("increaseExpectedAmount", "reduceExpectedAmount"):
        try:
            delta = int(params.get("deltaAmount", 0))
        except (TypeError, ValueError) as e:
            raise InvalidRequestError(f"malformed {name} action: {e}") from e
        amount = int(data.expectedAmount) + (delta if name == "increaseExpectedAmount" else -delta)
        if amount < 0:
            raise InvalidRequestError("expectedAmount cannot become negative")
        data.expectedAmount = str(amount)
    elif name == "addExtensionsData":
        _apply_extensions(data, params.get("extensionsData") or [], timestamp)
    else:
        logger.debug("skipping unsupported action %s on %s", name, data.requestId)
        return
    data.events.append({"name": name, "parameters": params, "timestamp": timestamp})


def compute_request_data(request_id: str, transactions: List[Dict[str, Any]]) -> RequestData:
    """Replay the channel's transactions into the current request state."""
    data: Optional[RequestData] = None
    pending = False
    for entry in transactions:
        tx = entry.get("transaction") or {}
        try:
            signed = json.loads(tx["data"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidRequestError(f"unreadable transaction on {request_id}: {e}") from e
        timestamp = entry.get("timestamp")
        pending = pending or entry.get("state") == "pending"
        if data is None:
            if (signed.get("data") or {}).get("name") != "create":
                raise InvalidRequestError(f"first action on {request_id} is not create")
            if compute_request_id(signed) != request_id.lower():
                logger.warning("request id %s does not match its create action", request_id)
            data = _from_create(request_id, signed, timestamp)
            data.events.append({"name": "create", "parameters": signed["data"].get("parameters"), "timestamp": timestamp})
        else:
            _apply_action(data, signed, timestamp)
    if data is None:
        raise RequestNotFoundError(f"Request not found: {request_id}")
    data.pending = pending
    if pending and data.state == RequestState.created and len(data.events) == 1:
        data.state = RequestState.pending
    return data


# -------------------------------
# Client
# -------------------------------


class Request:
    def __init__(
        self,
        client: "RequestNetworkClient",
        request_id: str,
        *,
        data: Optional[RequestData] = None,
        transaction_hash: Optional[str] = None,
    ):
        self.client = client
        self.request_id = request_id
        self.transaction_hash = transaction_hash
        self._data = data

    async def refresh(self) -> RequestData:
        transactions = await self.client.gateway.get_transactions_by_channel_id(self.request_id)
        self._data = compute_request_data(self.request_id, transactions)
        return self._data

    async def get_data(self) -> RequestData:
        if self._data is None:
            return await self.refresh()
        return self._data

    async def _poll_confirmation(self, poll_interval: float) -> RequestData:
        while True:
            if self.transaction_hash is not None:
                confirmed = await self.client.gateway.get_confirmed_transaction(self.transaction_hash)
                if confirmed is not None and self._data is not None:
                    self._data.pending = False
                    if self._data.state == RequestState.pending:
                        self._data.state = RequestState.created
                    return self._data
            else:
                data = await self.refresh()
                if not data.pending:
                    return data
            await asyncio.sleep(poll_interval)

    async def wait_for_confirmation(
        self, timeout: Optional[float] = None, poll_interval: float = DEFAULT_POLL_INTERVAL_S
    ) -> RequestData:
        """Suspend until the node confirms the request.

        ``timeout`` of None waits forever; cancelling the awaiting task stops polling.
        """
        logger.info("waiting for confirmation of %s (timeout=%s)", self.request_id, timeout)
        try:
            return await asyncio.wait_for(self._poll_confirmation(poll_interval), timeout)
        except asyncio.TimeoutError as e:
            raise ConfirmationTimeoutError(
                f"request {self.request_id} not confirmed after {timeout}s"
            ) from e


class RequestNetworkClient:
    def __init__(
        self,
        base_url: str,
        signature_provider: Optional[EthereumPrivateKeySignatureProvider] = None,
        *,
        timeout_s: float = 15.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.gateway = GatewayClient(base_url, timeout_s=timeout_s, http=http)
        self.signature_provider = signature_provider

    async def create_request(self, params: CreateRequestParameters) -> Request:
        if self.signature_provider is None:
            raise InvalidRequestError("a signature provider is required to create requests")
        action = build_create_action(params)
        signed = self.signature_provider.sign(action, params.signer)
        request_id = compute_request_id(signed)
        transaction_data = {"data": json.dumps(signed, separators=(",", ":"), ensure_ascii=False)}
        topics = [
            _identity_topic(identity)
            for identity in (params.requestInfo.payee, params.requestInfo.payer)
            if identity is not None
        ] + list(params.topics)
        logger.info("persisting request %s", request_id)
        await self.gateway.persist_transaction(
            channel_id=request_id, transaction_data=transaction_data, topics=topics
        )
        data = compute_request_data(
            request_id,
            [{"transaction": transaction_data, "timestamp": action["parameters"]["timestamp"], "state": "pending"}],
        )
        return Request(
            self,
            request_id,
            data=data,
            transaction_hash=normalize_keccak256_hash(transaction_data),
        )

    async def from_request_id(self, request_id: str) -> Request:
        request = Request(self, request_id)
        await request.refresh()
        return request

    async def aclose(self) -> None:
        await self.gateway.aclose()

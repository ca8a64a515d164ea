# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import json
import os
from typing import Any, Dict

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_keys import keys
from eth_utils import keccak

from .errors import SignatureError
from .models import Identity, IdentityType, SignatureMethod

# Multi-format prefix of a normalized keccak256 hash
HASH_PREFIX = "01"


def normalize(data: Any) -> str:
    """Deterministic, case-insensitive serialization used for every hash on the network."""
    if data is None:
        return "undefined"
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False).lower()


def normalize_keccak256_hash(data: Any) -> str:
    return "0x" + keccak(text=normalize(data)).hex()


def serialize_hash(hash_hex: str) -> str:
    h = hash_hex[2:] if hash_hex.startswith("0x") else hash_hex
    return HASH_PREFIX + h.lower()


def generate_salt() -> str:
    return os.urandom(8).hex()


class EthereumPrivateKeySignatureProvider:
    def __init__(self, private_key: str, method: SignatureMethod = SignatureMethod.ECDSA):
        if not private_key:
            raise ValueError("private_key required for EthereumPrivateKeySignatureProvider")
        try:
            self._account = Account.from_key(private_key)
        except Exception as e:
            raise SignatureError(f"invalid private key: {e}") from e
        self.method = method

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def identity(self) -> Identity:
        return Identity(type=IdentityType.ETHEREUM_ADDRESS, value=self.address)

    def sign(self, data: Any, signer: Identity) -> Dict[str, Any]:
        if not self.identity.same_as(signer):
            raise SignatureError(f"no private key available for signer {signer.value}")
        digest = normalize_keccak256_hash(data)
        if self.method == SignatureMethod.ECDSA:
            signed = self._account.unsafe_sign_hash(bytes.fromhex(digest[2:]))
        else:
            signed = self._account.sign_message(encode_defunct(hexstr=digest))
        return {
            "data": data,
            "signature": {"method": self.method.value, "value": "0x" + bytes(signed.signature).hex()},
        }


def recover_signer(signed: Dict[str, Any]) -> Identity:
    """Recover the identity that produced a ``{data, signature}`` envelope."""
    sig = signed.get("signature") or {}
    try:
        method = SignatureMethod(sig.get("method"))
        raw = bytes.fromhex(str(sig.get("value", ""))[2:])
        digest = normalize_keccak256_hash(signed.get("data"))
        if method == SignatureMethod.ECDSA_ETHEREUM:
            address = Account.recover_message(encode_defunct(hexstr=digest), signature=raw)
        else:
            if len(raw) != 65:
                raise ValueError("signature must be 65 bytes")
            v = raw[64] - 27 if raw[64] >= 27 else raw[64]
            signature = keys.Signature(signature_bytes=raw[:64] + bytes([v]))
            address = signature.recover_public_key_from_msg_hash(bytes.fromhex(digest[2:])).to_checksum_address()
    except Exception as e:
        raise SignatureError(f"cannot recover signer: {e}") from e
    return Identity(type=IdentityType.ETHEREUM_ADDRESS, value=address)

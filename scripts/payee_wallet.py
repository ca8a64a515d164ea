# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
"""
Create the payee wallet that signs invoices and check its Sepolia balances.

Usage:
  python scripts/payee_wallet.py            # create wallet, save to .env
  python scripts/payee_wallet.py --balance  # ETH / FAU balances of the payee
"""

import os
import sys
from typing import Tuple

from dotenv import load_dotenv, set_key
from eth_account import Account
from web3 import Web3

load_dotenv()

SEPOLIA_RPC = os.getenv("SEPOLIA_RPC_URL", "https://ethereum-sepolia-rpc.publicnode.com")
FAU_TOKEN_ADDRESS = os.getenv("INVOICE_TOKEN_ADDRESS", "0x370DE27fdb7D1Ff1e1BaA7D11c5820a324Cf623C")

# ERC20 ABI (only necessary functions)
ERC20_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "type": "function",
    },
    {
        "constant": True,
        "inputs": [],
        "name": "decimals",
        "outputs": [{"name": "", "type": "uint8"}],
        "type": "function",
    },
]


def create_payee_wallet(env_file: str = ".env", *, overwrite: bool = False) -> str:
    """Generate a payee key and store it as PAYEE_PRIVATE_KEY in env_file."""
    if not overwrite and os.path.exists(env_file):
        with open(env_file, "r") as f:
            if any(line.startswith("PAYEE_PRIVATE_KEY=") and line.strip() != "PAYEE_PRIVATE_KEY=" for line in f):
                raise RuntimeError(f"PAYEE_PRIVATE_KEY already set in {env_file}")
    account = Account.create()
    if not os.path.exists(env_file):
        open(env_file, "a").close()
    set_key(env_file, "PAYEE_PRIVATE_KEY", "0x" + bytes(account.key).hex())
    set_key(env_file, "PAYEE_ADDRESS", account.address)
    return account.address


def read_balances(w3: Web3, address: str) -> Tuple[int, int, int]:
    """Return (eth_wei, token_raw, token_decimals) for address."""
    token = w3.eth.contract(address=Web3.to_checksum_address(FAU_TOKEN_ADDRESS), abi=ERC20_ABI)
    checksum = Web3.to_checksum_address(address)
    return (
        w3.eth.get_balance(checksum),
        token.functions.balanceOf(checksum).call(),
        token.functions.decimals().call(),
    )


def check_balances() -> None:
    key = os.getenv("PAYEE_PRIVATE_KEY")
    if not key:
        print("PAYEE_PRIVATE_KEY not configured; run: python scripts/payee_wallet.py")
        return
    address = Account.from_key(key).address
    w3 = Web3(Web3.HTTPProvider(SEPOLIA_RPC))
    if not w3.is_connected():
        print(f"Unable to connect to Sepolia RPC {SEPOLIA_RPC}")
        return
    eth_wei, token_raw, decimals = read_balances(w3, address)
    print(f"Payee wallet: {address}")
    print(f"   ETH: {w3.from_wei(eth_wei, 'ether'):.6f}")
    print(f"   FAU: {token_raw / 10**decimals:.4f}")
    print(f"\nhttps://sepolia.etherscan.io/address/{address}")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "--balance":
        check_balances()
    else:
        print(f"Payee address: {create_payee_wallet()}")
        print("Private key saved to .env as PAYEE_PRIVATE_KEY")

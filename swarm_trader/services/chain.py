"""
On-chain helpers: native balances over JSON-RPC and router call-data encoding.
"""
from decimal import Decimal
from typing import Iterable, Union

from web3 import Web3

ROUTER_SWAP_SIGNATURE = "aoSwap(address,address,address[],bytes,uint256)"

ROUTER_ABI = [{
    "inputs": [
        {"name": "_swapRouter", "type": "address"},
        {"name": "_token", "type": "address"},
        {"name": "_agentAddress", "type": "address[]"},
        {"name": "_data", "type": "bytes"},
        {"name": "_quotedTokenAmount", "type": "uint256"}
    ],
    "name": "aoSwap",
    "outputs": [],
    "stateMutability": "payable",
    "type": "function"
}]


def get_web3(rpc_url: str) -> Web3:
    return Web3(Web3.HTTPProvider(rpc_url))


def get_balance_eth(w3: Web3, address: str) -> Decimal:
    """Native balance of ``address`` in ether."""
    balance_wei = w3.eth.get_balance(Web3.to_checksum_address(address))
    return Web3.from_wei(balance_wei, "ether")


def eth_to_wei(amount: Union[Decimal, str]) -> int:
    return Web3.to_wei(Decimal(amount), "ether")


def encode_router_swap(
    swap_router: str,
    token: str,
    agent_addresses: Iterable[str],
    swap_data: str,
    quoted_amount: Union[int, str],
) -> str:
    """
    ABI-encode the router contract's swap entry point.

    The contract forwards ``swap_data`` to ``swap_router`` and credits the
    participating agent wallets.

    Raises:
        ValueError: an address or the swap data is not valid hex
    """
    router = Web3().eth.contract(abi=ROUTER_ABI)
    call = router.functions.aoSwap(
        Web3.to_checksum_address(swap_router),
        Web3.to_checksum_address(token),
        [Web3.to_checksum_address(a) for a in agent_addresses],
        Web3.to_bytes(hexstr=swap_data),
        int(quoted_amount),
    )
    return call._encode_transaction_data()

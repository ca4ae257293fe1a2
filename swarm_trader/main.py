"""
Command-line entry point.

Usage:
    swarm-trader list-agents              # agents with wallet balances
    swarm-trader load-executor-details    # executor wallet and balance
    swarm-trader create-executor-wallet   # create and save the executor wallet
    swarm-trader chat [-d MESSAGE]        # one pass
    swarm-trader run                      # pass, sleep, repeat until stopped
"""
import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

import httpx
from pydantic import ValidationError

from .agents.orchestrator import PipelineDriver
from .agents.registry import load_agents
from .config import TradingConfig, get_settings
from .errors import ConfigError, ExecutionError, StartupError
from .schemas import Agent, PassResult, TradeStatus
from .services.chain import get_balance_eth, get_web3
from .services.wallet_client import PrivyWalletClient, load_wallet, save_wallet

logger = logging.getLogger("swarm_trader.main")


def _banner(title: str) -> None:
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


async def _fetch_balance(w3, address: str) -> str:
    if not address:
        return "N/A"
    try:
        return f"{await asyncio.to_thread(get_balance_eth, w3, address)}"
    except Exception as e:
        print(f"Error fetching balance for {address}: {e}")
        return "N/A"


async def list_agents(cfg: TradingConfig) -> int:
    agents = load_agents(cfg.agents_dir)
    w3 = get_web3(cfg.rpc_url)
    balances = await asyncio.gather(*(_fetch_balance(w3, a.wallet_address) for a in agents))

    print("\nConfigured Agents:")
    for agent, balance in zip(agents, balances):
        print(f"\n{agent.name}:")
        print(f"Role: {agent.role.value} ({agent.tag or 'untagged'})")
        print(f"Wallet Address: {agent.wallet_address or 'N/A'}")
        print(f"Balance: {balance} ETH")
        print(f"Endpoint: {agent.endpoint}")
    return 0


async def load_executor_details(cfg: TradingConfig) -> int:
    wallet = load_wallet(cfg.wallet_path)
    balance = await _fetch_balance(get_web3(cfg.rpc_url), wallet.wallet_address)

    print("\nExecutor:")
    print(f"Wallet ID: {wallet.wallet_id}")
    print(f"Wallet Address: {wallet.wallet_address}")
    print(f"Balance: {balance} ETH")
    return 0


async def create_executor_wallet(cfg: TradingConfig) -> int:
    async with httpx.AsyncClient(timeout=30.0) as http:
        client = PrivyWalletClient(http, cfg.privy_app_id, cfg.privy_app_secret, cfg.privy_api_url)
        wallet = await client.create_wallet()

    path = save_wallet(cfg.wallet_path, wallet)
    print("\nExecutor wallet created successfully")
    print(f"Wallet ID: {wallet.wallet_id}")
    print(f"Wallet Address: {wallet.wallet_address}")
    print(f"Saved to: {path}")
    return 0


def _prompt_message() -> Optional[str]:
    """Ask until a non-empty message is entered; None when input is closed."""
    while True:
        try:
            message = input("Enter your message: ").strip()
        except EOFError:
            print()
            return None
        if message:
            return message
        print("Message cannot be empty")


def print_pass(result: PassResult) -> None:
    if result.aborted:
        print(f"\nPass aborted: {'; '.join(result.errors)}")
        return
    if not result.candidates:
        print("\nNo candidates found this pass.")
        return

    for outcome in result.outcomes:
        d = outcome.decision
        print(f"\n${outcome.candidate.symbol} ({outcome.candidate.address})")
        for vote in outcome.tally.votes:
            status = "FAILED" if vote.failed else vote.vote.value.upper()
            print(f"   {vote.agent_name}: {status}")
            if vote.reasoning:
                print(f"      Reason: {vote.reasoning}")
        print(f"   Approvals: {d.approvals}/{d.total} (quorum {d.quorum})")
        if d.status == TradeStatus.EXECUTED:
            print(f"   Executed with tx hash {d.tx_hash}")
        elif d.status == TradeStatus.FAILED:
            print(f"   Trade FAILED: {d.error}")
        elif d.status == TradeStatus.SHADOW:
            print("   SHADOW MODE: approved but NOT executed")
        else:
            print("   Skipped")


async def chat(cfg: TradingConfig, direct: Optional[str]) -> int:
    agents = load_agents(cfg.agents_dir)
    request = direct or _prompt_message()
    if request is None:
        print("No message entered.")
        return 1

    async with httpx.AsyncClient(timeout=cfg.agent_timeout_seconds) as http:
        driver = PipelineDriver.from_config(cfg, agents, http)
        result = await driver.run_pass(request)

    print_pass(result)
    return 1 if result.aborted else 0


async def run(cfg: TradingConfig, max_passes: Optional[int]) -> int:
    agents: List[Agent] = load_agents(cfg.agents_dir)

    _banner("SWARM TRADER STARTING")
    print(f"Mode: {cfg.get_mode_description()}")
    print(f"Loop Interval: {cfg.loop_seconds}s (scanner backoff {cfg.scanner_backoff_seconds}s)")
    print("=" * 60 + "\n")

    async with httpx.AsyncClient(timeout=cfg.agent_timeout_seconds) as http:
        driver = PipelineDriver.from_config(cfg, agents, http)

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, driver.request_stop)
            except NotImplementedError:
                pass

        passes = await driver.run_forever(max_passes=max_passes)

    print(f"\nShutting down after {passes} passes. Goodbye!")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swarm-trader",
        description="CLI to interact with multiple AI agents and trade on their consensus",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list-agents", help="List all configured agents")
    sub.add_parser("load-executor-details", help="Show the executor wallet and its balance")
    sub.add_parser("create-executor-wallet", help="Create a new executor wallet and save it")

    chat_parser = sub.add_parser("chat", help="Run one scanner -> evaluators -> trade pass")
    chat_parser.add_argument("-d", "--direct", metavar="MESSAGE", help="Send message directly without prompt")

    run_parser = sub.add_parser("run", help="Run passes continuously until interrupted")
    run_parser.add_argument("--max-passes", type=int, default=None, help="Stop after N passes")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point."""
    args = build_parser().parse_args(argv)

    try:
        cfg = get_settings()
    except ValidationError as e:
        print(f"CONFIGURATION ERROR: {e}")
        return 1

    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    commands = {
        "list-agents": lambda: list_agents(cfg),
        "load-executor-details": lambda: load_executor_details(cfg),
        "create-executor-wallet": lambda: create_executor_wallet(cfg),
        "chat": lambda: chat(cfg, args.direct),
        "run": lambda: run(cfg, args.max_passes),
    }

    try:
        return asyncio.run(commands[args.command]())
    except ConfigError as e:
        print(f"\n{e.message}")
        return 1
    except StartupError as e:
        print(f"\nSTARTUP ERROR: {e.message}")
        return 1
    except ExecutionError as e:
        print(f"\nError: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

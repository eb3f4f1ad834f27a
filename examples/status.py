#!/usr/bin/env python3
"""
Example: status report

Syncs every configured chain and prints nonces, balance and the number
of payouts left.

Run this example:
    FAUCET_PRIVATE_KEY=0x... python examples/status.py
"""

import asyncio
import json
import sys

from evmfaucet import Faucet, configure_logging, format_relative_time, load_config


async def main(as_json: bool) -> None:
    configure_logging("WARNING")

    config = load_config("examples/faucet.example.json")
    faucet = await Faucet.create(config)
    status = faucet.status()

    if as_json:
        print(json.dumps(status.to_dict(), indent=2))
        return

    print("=" * 60)
    print(f"Faucet {status.address}")
    print("=" * 60)
    for chain in status.chains:
        balance = "unknown" if chain.balance is None else f"{chain.balance / 10**18:.4f}"
        print(f"{chain.name} ({chain.chain_id})")
        print(f"  balance:       {balance} {chain.currency_symbol}")
        print(f"  servings left: {chain.servings_left}")
        print(f"  nonces:        pending={chain.pending_nonce} confirmed={chain.confirmed_nonce}")
        print(f"  fee market:    {'yes' if chain.use_fee_market else 'legacy'}")
        print(f"  last request:  {format_relative_time(chain.last_requested_at)}")
        if chain.explorer_url:
            print(f"  explorer:      {chain.explorer_url}")
        for error in chain.recent_errors:
            print(f"  error:         {error}")
        print()


if __name__ == "__main__":
    asyncio.run(main("--json" in sys.argv[1:]))

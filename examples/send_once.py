#!/usr/bin/env python3
"""
Example: single payout

Sends one payout on one chain and waits for it to confirm.
The signing key is read from FAUCET_PRIVATE_KEY (or a .env file).

Run this example:
    FAUCET_PRIVATE_KEY=0x... python examples/send_once.py 11155111 0xRecipient
"""

import asyncio
import sys

from evmfaucet import Faucet, TransferConfirmed, configure_logging, load_config


async def main(chain_id: int, recipient: str) -> int:
    configure_logging("INFO")

    config = load_config("examples/faucet.example.json")
    faucet = await Faucet.create(config)
    print(f"Faucet address: {faucet.address}")

    chain = faucet.chain(chain_id)
    print(f"[{chain.name}] pending={chain.pending_nonce} confirmed={chain.confirmed_nonce}")

    outcome = await faucet.send(chain_id, recipient)
    if isinstance(outcome, TransferConfirmed):
        print(f"Confirmed: {outcome.tx_hash}")
        return 0

    print(f"Failed: {outcome.reason}")
    return 1


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)
    sys.exit(asyncio.run(main(int(sys.argv[1]), sys.argv[2])))

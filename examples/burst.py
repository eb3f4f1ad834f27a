#!/usr/bin/env python3
"""
Example: concurrent payouts

Fires several payouts at once on one chain. Nonces are handed out in
request order; at most `sender.window` transactions are in flight ahead
of the last confirmed one, the rest wait their turn.

Run this example:
    FAUCET_PRIVATE_KEY=0x... python examples/burst.py 11155111 0xA... 0xB... 0xC...
"""

import asyncio
import sys
from typing import List

from evmfaucet import Faucet, TransferConfirmed, configure_logging, load_config


async def main(chain_id: int, recipients: List[str]) -> None:
    configure_logging("INFO")

    faucet = await Faucet.create(load_config("examples/faucet.example.json"))
    outcomes = await asyncio.gather(*(faucet.send(chain_id, r) for r in recipients))

    for recipient, outcome in zip(recipients, outcomes):
        if isinstance(outcome, TransferConfirmed):
            print(f"{recipient}: {outcome.tx_hash}")
        else:
            print(f"{recipient}: FAILED ({outcome.reason})")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print(__doc__)
        sys.exit(2)
    asyncio.run(main(int(sys.argv[1]), sys.argv[2:]))

#!/usr/bin/env python3
"""Send a small amount of NEAR and of PTC using the library directly."""
import asyncio

from pynear_transfer import ConfigManager, TransferRequest, execute
from pynear_transfer.utils.logger import setup_logging


async def main():
    config = ConfigManager().get_network_config("testnet")

    from_account = config.account_id
    to_account = "0xpjunior.testnet"

    for symbol, amount in (("NEAR", "0.01"), ("PTC", "100")):
        print(f"\nSending {amount} {symbol} from {from_account} to {to_account}")
        result = await execute(TransferRequest(from_account, to_account, amount, symbol), config)

        if result.success:
            print("Transfer successful!")
            print("Transaction hash:", result.data["transaction_hash"])
        else:
            print("Transfer failed:", result.error)


if __name__ == "__main__":
    setup_logging(verbose=True)
    asyncio.run(main())

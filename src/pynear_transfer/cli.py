import os
import sys
import json
import asyncio
import argparse
import logging

from .config import DEFAULT_CONFIG_PATH, ConfigManager
from .exceptions import TransferError
from .tokens import TOKEN_LIST, is_native
from .transfer import TransferRequest, execute, query_balance, register_account
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_RECEIVER = "0xpjunior.testnet"
DEFAULT_AMOUNT = "1"
DEFAULT_SYMBOL = "NEAR"


def create_parser():
    parser = argparse.ArgumentParser(
        prog='pynear-transfer',
        description='Transfer NEAR or NEP-141 tokens between accounts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Global options (--network, --config, --account) must come BEFORE the command

    # Send 1 NEAR from the signing account to 0xpjunior.testnet
    pynear-transfer transfer

    # Send 5 PTC tokens with a memo
    pynear-transfer transfer --receiver bob.testnet --amount 5 --symbol PTC --memo "thanks"

    # Check a balance
    pynear-transfer balance bob.testnet PTC
    """
    )

    # Global options
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH,
                        help=f'Config file path (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--network', default='testnet',
                        help='Network to use (default: testnet)')
    parser.add_argument('--rpc-url',
                        help='Override RPC endpoint URL (e.g., https://rpc.testnet.near.org)')
    parser.add_argument('--account', dest='signer',
                        help='Signing account (default: from network config)')
    parser.add_argument('--timeout', type=float,
                        help='Seconds to wait for each network call')
    parser.add_argument('--log-dir', default='logs',
                        help='Directory for log files (default: logs)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Transfer command
    transfer_parser = subparsers.add_parser('transfer',
        help='Transfer NEAR or tokens (default command)',
        description="""
        Transfer between accounts. NEAR is paid directly; registered tokens
        go through the token contract's ft_transfer.

        Amounts for NEAR are whole NEAR (decimals allowed down to one
        yoctoNEAR). Token amounts are passed to the contract as given.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    transfer_parser.add_argument('--sender', help='Sender account (default: signing account)')
    transfer_parser.add_argument('--receiver', default=DEFAULT_RECEIVER,
                                 help=f'Recipient account (default: {DEFAULT_RECEIVER})')
    transfer_parser.add_argument('--amount', default=DEFAULT_AMOUNT,
                                 help=f'Amount to send (default: {DEFAULT_AMOUNT})')
    transfer_parser.add_argument('--symbol', default=DEFAULT_SYMBOL,
                                 help=f'Token symbol (default: {DEFAULT_SYMBOL})')
    transfer_parser.add_argument('--memo', help='Transfer memo (tokens only)')

    # Balance command
    balance_parser = subparsers.add_parser('balance', help='Get NEAR or token balance')
    balance_parser.add_argument('account', help='Account to check')
    balance_parser.add_argument('symbol', help='Token symbol (e.g., NEAR)')

    # Register command
    register_parser = subparsers.add_parser('register',
        help='Register an account with a token contract (storage deposit)')
    register_parser.add_argument('account', help='Account to register')
    register_parser.add_argument('symbol', help='Token symbol (e.g., PTC)')

    # Tokens command
    subparsers.add_parser('tokens', help='List supported tokens')

    return parser


def build_request(args, config):
    """Turn parsed arguments into a TransferRequest; no command means the defaults."""
    return TransferRequest(
        sender_id=getattr(args, 'sender', None) or config.account_id,
        receiver_id=getattr(args, 'receiver', DEFAULT_RECEIVER),
        amount=getattr(args, 'amount', DEFAULT_AMOUNT),
        symbol=getattr(args, 'symbol', DEFAULT_SYMBOL),
        memo=getattr(args, 'memo', None),
    )


def list_tokens():
    tokens = {}
    for symbol, entry in TOKEN_LIST.items():
        if is_native(entry):
            tokens[symbol] = {"type": "native"}
        else:
            tokens[symbol] = {"type": "fungible_token", "contract_id": entry.contract_id}
    return tokens


def run(args):
    """Run the parsed command and return the result dict to print."""
    if args.command == 'tokens':
        return {"success": True, "data": list_tokens()}

    config = ConfigManager(args.config).get_network_config(args.network).override(
        node_url=args.rpc_url,
        account_id=args.signer,
        timeout=args.timeout,
    )

    if args.command in (None, 'transfer'):
        request = build_request(args, config)
        logger.debug(f"Transfer request: {request}")
        result = asyncio.run(execute(request, config))
    elif args.command == 'balance':
        result = asyncio.run(query_balance(args.account, args.symbol, config))
    else:
        result = asyncio.run(register_account(args.account, args.symbol, config))
    return result.to_dict()


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        setup_logging(verbose=args.verbose, log_dir=args.log_dir)
        result = run(args)
        print(json.dumps(result, indent=2))
        return 0

    except BrokenPipeError:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 1
    except TransferError as e:
        logger.error(str(e))
        print(json.dumps({
            "success": False,
            "error": str(e)
        }))
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print(json.dumps({
            "success": False,
            "error": str(e)
        }))
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
clientrsa - Command Line Entry Point

Commands:
    encrypt     Encrypt a message and print the ciphertext blocks as JSON
    export-key  Print a PEM public key as 64-symbol modulus/exponent strings
"""

import argparse
import json
import logging
import sys
from typing import Iterable, Optional

from .config import METHODS, DEFAULT_STRING_BASE, Settings, load_settings
from .errors import EncryptionError, MalformedInputError
from .encryption.keys import PublicKey, load_public_key_file
from .encryption.rsa_encrypt import RSAEncryptor


logger = logging.getLogger(__name__)


def _load_key(args: argparse.Namespace) -> PublicKey:
    if args.key_file:
        return load_public_key_file(args.key_file)
    if not (args.modulus and args.exponent and args.bits):
        raise MalformedInputError("Provide --key-file or all of --modulus, --exponent and --bits")
    return PublicKey.from_strings(args.modulus, args.exponent, args.bits, args.input_base)


# --- Command handlers ---------------------------------------------------------


def _cmd_encrypt(args: argparse.Namespace, settings: Settings) -> None:
    key = _load_key(args)
    message = args.message if args.message is not None else sys.stdin.read()
    encryptor = RSAEncryptor(
        key,
        workers=args.workers if args.workers is not None else settings.workers,
        method=args.method if args.method is not None else settings.method,
    )
    blocks = encryptor.encrypt(message, args.output_base)
    print(json.dumps(blocks))


def _cmd_export_key(args: argparse.Namespace, settings: Settings) -> None:
    key = load_public_key_file(args.key_file)
    modulus, exponent = key.to_strings()
    print(json.dumps({'modulus': modulus, 'exponent': exponent, 'bits': key.bits}))


# --- CLI ----------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clientrsa",
        description="Client-side RSA (EME-PKCS1-v1_5) encryption."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    encrypt_parser = subparsers.add_parser("encrypt", help="Encrypt a message.")
    encrypt_parser.add_argument("message", nargs="?", help="Message text (read from stdin if omitted).")
    encrypt_parser.add_argument("--key-file", help="PEM encoded RSA public key.")
    encrypt_parser.add_argument("--modulus", help="Modulus N as an encoded string.")
    encrypt_parser.add_argument("--exponent", help="Public exponent E as an encoded string.")
    encrypt_parser.add_argument("--bits", type=int, help="Key length in bits.")
    encrypt_parser.add_argument(
        "--input-base",
        type=int,
        default=DEFAULT_STRING_BASE,
        help="Base of --modulus and --exponent (default: 64).",
    )
    encrypt_parser.add_argument(
        "--output-base",
        type=int,
        default=DEFAULT_STRING_BASE,
        help="Base of the ciphertext strings (default: 64).",
    )
    encrypt_parser.add_argument("--workers", type=int, help="Worker threads (default: CLIENTRSA_WORKERS).")
    encrypt_parser.add_argument("--method", choices=METHODS, help="Reduction method (default: CLIENTRSA_METHOD).")
    encrypt_parser.set_defaults(func=_cmd_encrypt)

    export_parser = subparsers.add_parser("export-key", help="Print key parameters from a PEM file.")
    export_parser.add_argument("--key-file", required=True, help="PEM encoded RSA public key.")
    export_parser.set_defaults(func=_cmd_export_key)

    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Main entry point for clientrsa."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    try:
        settings = load_settings()
        logging.basicConfig(level=settings.log_level)
        args.func(args, settings)
    except (EncryptionError, OSError) as e:
        logger.debug(f"[CLI] {args.command} failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""
Origin Trial Token Command Line Interface.

Provides commands for minting tokens, verifying tokens, and dumping public
keys in a form that can be embedded in a token-accepting program.
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path
from typing import List, Optional

from jwcrypto import jwk

from origin_trial_token import config
from origin_trial_token.envelope import from_text, pack, to_text, unpack
from origin_trial_token.errors import TrialTokenError
from origin_trial_token.keys import read_public_key
from origin_trial_token.signer import read_signer
from origin_trial_token.token import Token, Usage
from origin_trial_token.validator import TokenValidator
from origin_trial_token.verifier import verifier_for_key


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def parse_expiry(value: str) -> datetime:
    """
    Parse an expiry given as RFC 2822 or RFC 3339.

    For example the output of `date --date="09:00 next Fri" -R`, or
    "2021-01-01T00:00:00Z". Naive times are taken as UTC.

    Raises:
        ValueError: If neither format matches.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        parsed = None

    if parsed is None:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Unknown date format for {value}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def cmd_mktoken(args: argparse.Namespace) -> int:
    """Build a token payload, and sign it when a private key is given."""
    try:
        expiry = parse_expiry(args.expiry)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if expiry <= datetime.now(timezone.utc):
        print("Error: Shouldn't expire in the past", file=sys.stderr)
        return 1

    token = Token(
        origin=args.origin,
        feature=args.feature,
        expiry=int(expiry.timestamp()),
        is_subdomain=args.subdomain,
        is_third_party=args.third_party,
        usage=Usage.SUBSET if args.subset_usage else Usage.NONE,
    )

    key_path = args.sign or config.PRIVATE_KEY_PATH
    if not key_path:
        print(token.to_payload().decode("utf-8"))
        return 0

    try:
        signer = read_signer(key_path)
        print(to_text(pack(args.token_version, token, signer)))
        return 0
    except OSError as e:
        print(f"Error reading private key: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error signing token: {e}", file=sys.stderr)
        return 1


def cmd_verify(args: argparse.Namespace) -> int:
    """Verify a base64 token and print its payload."""
    key_path = args.public_key or config.PUBLIC_KEY_PATH

    try:
        if key_path:
            verifier = verifier_for_key(read_public_key(key_path))
        else:
            print("⚠️  Warning: No public key provided, signature not verified", file=sys.stderr)
            verifier = None

        if args.check_expiry:
            result = TokenValidator(verifier, clock_skew_seconds=config.CLOCK_SKEW_SECONDS).validate(
                args.token
            )
            if not result.is_valid:
                print(f"Invalid token! ({result.error_kind}) {result.error}", file=sys.stderr)
                return 1
            token = result.token
        else:
            token = unpack(from_text(args.token), verifier)

    except OSError as e:
        print(f"Error reading public key: {e}", file=sys.stderr)
        return 1
    except TrialTokenError as e:
        print(f"Invalid token! ({e.kind}) {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({
            "valid": True,
            "origin": token.origin,
            "feature": token.feature,
            "expiry": token.expiry,
            "isSubdomain": token.is_subdomain,
            "isThirdParty": token.is_third_party,
            "usage": token.usage.value,
        }, indent=2))
    else:
        print(token.to_payload().decode("utf-8"))
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    """Print a public key as a Rust or C byte array, or as a JWK."""
    try:
        key = read_public_key(args.public_key)
    except OSError as e:
        print(f"Error reading public key: {e}", file=sys.stderr)
        return 1
    except TrialTokenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == "jwk":
        print(jwk.JWK.from_pem(Path(args.public_key).read_bytes()).export_public())
        return 0

    size = len(key.bytes)
    body = "".join(f" 0x{byte:02x}," for byte in key.bytes)
    print(f"// {key.kind.value} public key")
    if args.format == "c":
        print(f"static const unsigned char key[{size}] = {{{body} }};")
    else:
        print(f"const KEY: [u8; {size}] = [{body} ];")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='origin-trial-token',
        description='Mint, verify and inspect origin trial tokens'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # mktoken command
    p_mk = subparsers.add_parser('mktoken', help='Create a token payload or signed token')
    p_mk.add_argument('-o', '--origin', required=True, help='Origin, e.g. https://example.com:443')
    p_mk.add_argument('-f', '--feature', required=True, help='Feature name')
    p_mk.add_argument('-e', '--expiry', required=True, help='Expiry as RFC 2822 or RFC 3339')
    p_mk.add_argument(
        '-s', '--sign',
        help='PEM private key (Ed25519 or ECDSA P-256). '
             'Generate one with: openssl genpkey -algorithm ED25519 > out'
    )
    p_mk.add_argument('--subdomain', action='store_true', help='Also match subdomains')
    p_mk.add_argument('--third-party', action='store_true', help='Allow third-party use')
    p_mk.add_argument('--subset-usage', action='store_true', help='Restrict to subset usage')
    p_mk.add_argument(
        '--version', dest='token_version', type=int, default=config.TOKEN_VERSION,
        help='Envelope version tag'
    )

    # verify command
    p_verify = subparsers.add_parser('verify', help='Verify a base64 token')
    p_verify.add_argument('token', help='Base64-encoded token')
    p_verify.add_argument('-p', '--public-key', help='PEM public key for signature verification')
    p_verify.add_argument('--check-expiry', action='store_true', help='Reject expired tokens')
    p_verify.add_argument('--json', action='store_true', help='Output as JSON')

    # dump command
    p_dump = subparsers.add_parser('dump', help='Print a public key for embedding')
    p_dump.add_argument('public_key', help='PEM public key file')
    p_dump.add_argument(
        '--format', choices=('rust', 'c', 'jwk'), default='rust', help='Output format'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if args.command == 'mktoken':
        return cmd_mktoken(args)
    elif args.command == 'verify':
        return cmd_verify(args)
    elif args.command == 'dump':
        return cmd_dump(args)
    else:
        parser.print_help()
        return 0


if __name__ == '__main__':
    sys.exit(main())

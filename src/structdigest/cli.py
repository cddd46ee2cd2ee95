"""Command-line demonstration: digest an example Person record."""

import argparse
import sys
from dataclasses import dataclass

import numpy as np

from .digest import digest_bytes
from .encoding import encode
from .exceptions import StructDigestError
from .schema import register


@register
@dataclass(frozen=True)
class Person:
    id: np.uint32
    name: str


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="struct-digest",
        description="Print the SHA-256 digest of a canonically encoded Person record.",
    )
    parser.add_argument("--id", type=int, default=42, help="unsigned 32-bit identifier (default: 42)")
    parser.add_argument("--name", default="Alice", help="UTF-8 name (default: Alice)")
    parser.add_argument("-v", "--verbose", action="store_true", help="report each pipeline step on stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    person = Person(id=args.id, name=args.name)

    try:
        encoded = encode(person)
    except StructDigestError as e:
        print(f"[error] failed to encode {type(person).__name__}: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"[encode] {type(person).__name__}: {len(encoded)} bytes", file=sys.stderr)

    digest = digest_bytes(encoded)
    if args.verbose:
        print("[digest] sha256", file=sys.stderr)

    print(f"Hash (hex): {digest.to_hex()}")
    return 0

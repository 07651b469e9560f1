"""
bdstring CLI — inspect length-encoded string buffers.

Commands:
  bdstring encode    - Build a buffer holding TEXT and print it as hex
  bdstring decode    - Decode the length of a hex buffer and print the payload
  bdstring normalize - Adopt a foreign (plain NUL-terminated) hex buffer

Default capacity comes from BDSTRING_CAPACITY, else DEFAULT_CAPACITY.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys


def _default_capacity() -> int:
    from bdstring import DEFAULT_CAPACITY

    raw = os.environ.get("BDSTRING_CAPACITY", "")
    if not raw:
        return DEFAULT_CAPACITY
    try:
        return int(raw)
    except ValueError:
        print(f"Error: BDSTRING_CAPACITY must be an integer, got {raw!r}", file=sys.stderr)
        sys.exit(1)


def _parse_hex(text: str) -> bytearray:
    try:
        buf = bytearray.fromhex(text)
    except ValueError as e:
        print(f"Error: Invalid hex buffer: {e}", file=sys.stderr)
        sys.exit(1)
    if not buf:
        print("Error: Buffer is empty", file=sys.stderr)
        sys.exit(1)
    return buf


def _describe(buf: bytearray, length: int) -> None:
    from bdstring.codec import is_short_form

    if length == len(buf):
        form = "none (unterminated)"
    else:
        form = "short" if is_short_form(buf) else "escaped"
    print(f"  capacity: {len(buf)}")
    print(f"  length:   {length}")
    print(f"  form:     {form}")


def cmd_encode(args: argparse.Namespace) -> None:
    """Build a buffer holding TEXT."""
    from bdstring.lifecycle import new

    capacity = args.capacity if args.capacity is not None else _default_capacity()
    data = args.text.encode("utf-8")
    try:
        buf = new(capacity, data)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    from bdstring.codec import decode_length

    length = decode_length(buf)
    print(buf.hex())
    _describe(buf, length)
    if length < len(data):
        print(f"  truncated: {len(data) - length} byte(s) dropped")


def cmd_decode(args: argparse.Namespace) -> None:
    """Decode a hex buffer."""
    from bdstring.codec import decode_length
    from bdstring.errors import BDStringError

    buf = _parse_hex(args.hex)
    try:
        length = decode_length(buf, strict=not args.permissive)
    except BDStringError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(bytes(buf[:length]).decode("utf-8", errors="replace"))
    _describe(buf, length)


def cmd_normalize(args: argparse.Namespace) -> None:
    """Adopt a foreign buffer and re-encode it."""
    from bdstring.lifecycle import normalize

    buf = _parse_hex(args.hex)
    length = normalize(buf)
    print(buf.hex())
    _describe(buf, length)


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="bdstring",
        description="bdstring — length-encoded strings in fixed-capacity buffers.",
    )
    from bdstring import __version__
    parser.add_argument("--version", action="version", version=f"bdstring {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command")

    # encode
    p_enc = sub.add_parser("encode", help="Build a buffer holding TEXT")
    p_enc.add_argument("text", help="String content (UTF-8)")
    p_enc.add_argument("-c", "--capacity", type=int, default=None,
                       help="Buffer capacity (or set BDSTRING_CAPACITY)")

    # decode
    p_dec = sub.add_parser("decode", help="Decode the length of a hex buffer")
    p_dec.add_argument("hex", help="Buffer contents as hex")
    p_dec.add_argument("--permissive", action="store_true",
                       help="Treat an undecodable buffer as full instead of failing")

    # normalize
    p_norm = sub.add_parser("normalize", help="Adopt a plain NUL-terminated hex buffer")
    p_norm.add_argument("hex", help="Buffer contents as hex")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if not args.command:
        print("bdstring — length-encoded strings in fixed-capacity buffers")
        print()
        print("Usage:")
        print("  bdstring encode TEXT [--capacity N]")
        print("  bdstring decode HEX [--permissive]")
        print("  bdstring normalize HEX")
        print()
        print("Run 'bdstring <command> --help' for details on any command.")
        sys.exit(0)

    commands = {
        "encode": cmd_encode,
        "decode": cmd_decode,
        "normalize": cmd_normalize,
    }

    commands[args.command](args)


if __name__ == "__main__":
    main()

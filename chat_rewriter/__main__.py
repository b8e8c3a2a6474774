"""Main entry point"""

import argparse
import json
import sys
from typing import Optional

import httpx

from chat_rewriter.clients import build_conversation_payload, close_client, get_client
from chat_rewriter.config import MACROS_FILE, VERSION
from chat_rewriter.helpers import configure_logging
from chat_rewriter.macros import expand
from chat_rewriter.services.macro_store import init_macros, load_macros, save_macros
from chat_rewriter.services.validation import MacroValidationError, parse_and_validate


def cmd_expand(args: argparse.Namespace) -> int:
    """Print the expansion of a message"""
    text = " ".join(args.text)
    print(expand(text, load_macros(args.file)))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Validate a macro file without storing it"""
    path = args.path or args.file or MACROS_FILE
    try:
        with open(path, encoding="utf-8") as f:
            macros = parse_and_validate(f.read())
    except OSError as err:
        print(f"Could not read {path}: {err}", file=sys.stderr)
        return 1
    except MacroValidationError as err:
        print(err, file=sys.stderr)
        return 1
    print(f"{path}: {len(macros)} macro(s) OK")
    return 0


def cmd_save(args: argparse.Namespace) -> int:
    """Validate a macro file and store it"""
    try:
        with open(args.source, encoding="utf-8") as f:
            raw = f.read()
        macros = save_macros(raw, args.file)
    except OSError as err:
        print(f"Could not save macros: {err}", file=sys.stderr)
        return 1
    except MacroValidationError as err:
        print(err, file=sys.stderr)
        return 1
    print(f"Stored {len(macros)} macro(s)")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Store the example macros if nothing is stored yet"""
    if init_macros(args.file):
        print(f"Wrote example macros to {args.file or MACROS_FILE}")
    else:
        print(f"{args.file or MACROS_FILE} already exists, leaving it alone")
    return 0


def cmd_send(args: argparse.Namespace) -> int:
    """Send a conversation payload through the rewriting client"""
    body = json.dumps(build_conversation_payload(args.prompt))
    try:
        response = get_client().post(
            args.url,
            content=body,
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as err:
        print(f"Error sending request to {args.url}: {err}", file=sys.stderr)
        return 1
    finally:
        close_client()
    print(f"{response.status_code} {response.reason_phrase}")
    return 0 if response.is_success else 1


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser"""
    parser = argparse.ArgumentParser(
        prog="chat_rewriter",
        description="Rewrite chat messages using short macros",
    )
    parser.add_argument("--version", action="version", version=VERSION)
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="log pass-through decisions"
    )
    parser.add_argument(
        "--file",
        default=None,
        help=f"macro file to use (default: {MACROS_FILE})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_expand = sub.add_parser("expand", help="print the expansion of a message")
    p_expand.add_argument("text", nargs="+")
    p_expand.set_defaults(func=cmd_expand)

    p_check = sub.add_parser("check", help="validate a macro file")
    p_check.add_argument("path", nargs="?")
    p_check.set_defaults(func=cmd_check)

    p_save = sub.add_parser("save", help="validate and store a macro file")
    p_save.add_argument("source")
    p_save.set_defaults(func=cmd_save)

    p_init = sub.add_parser("init", help="store the example macros")
    p_init.set_defaults(func=cmd_init)

    p_send = sub.add_parser("send", help="send a message through the rewriter")
    p_send.add_argument("url")
    p_send.add_argument("--prompt", required=True)
    p_send.set_defaults(func=cmd_send)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line interface"""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())

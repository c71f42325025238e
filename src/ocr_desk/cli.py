from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import requests

from .config import KNOWN_MODELS, load_settings
from .convert.markup import markup_to_markdown, markup_to_text
from .errors import InputValidationError
from .extraction import ExtractionStatus, extract_image
from .history import HistoryCache
from .http_client import OcrClient
from .images import read_image_data_url
from .models import HistoryEntry
from .store import API_KEY_KEY, FileStore


def _render(result: str, *, fmt: str) -> str:
    if fmt == "text":
        return markup_to_text(result)
    if fmt == "markdown":
        return markup_to_markdown(result)
    return result


def _emit(content: str, out: Path | None) -> None:
    if out is None:
        print(content)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(content, encoding="utf-8", newline="\n")
    print(str(out))


def _add_format_args(p: argparse.ArgumentParser) -> None:
    group = p.add_mutually_exclusive_group()
    group.add_argument(
        "--text",
        dest="fmt",
        action="store_const",
        const="text",
        help="Print plain text (what a copy to clipboard would hold)",
    )
    group.add_argument(
        "--markdown",
        dest="fmt",
        action="store_const",
        const="markdown",
        help="Print the result converted to Markdown",
    )
    group.add_argument(
        "--html",
        dest="fmt",
        action="store_const",
        const="html",
        help="Print the rendered markup (default)",
    )
    p.set_defaults(fmt="html")


def _format_entry_line(entry: HistoryEntry) -> str:
    return f"{entry.id}  {entry.timestamp}  {entry.model}  {entry.image_label}"


def main(argv: list[str] | None = None) -> int:
    settings = load_settings()

    parser = argparse.ArgumentParser(prog="ocr_desk")
    parser.add_argument(
        "--home",
        type=Path,
        default=settings.home_dir,
        help="State directory holding the API key and history",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    extract_p = sub.add_parser("extract", help="Recognize text in one image")
    extract_p.add_argument("image", type=Path)
    extract_p.add_argument(
        "--model",
        default=settings.model,
        help=f"OCR model (known: {', '.join(KNOWN_MODELS)})",
    )
    extract_p.add_argument(
        "--api-key",
        default=None,
        help="Overrides MISTRAL_API_KEY and the stored key",
    )
    extract_p.add_argument(
        "--label",
        default=None,
        help="Name recorded in history. Defaults to the image file name",
    )
    extract_p.add_argument("--api-url", default=settings.api_url)
    extract_p.add_argument("--timeout", type=int, default=settings.timeout_s)
    extract_p.add_argument(
        "--escape-alt",
        action="store_true",
        help="HTML-escape image alt text taken from the OCR markdown",
    )
    extract_p.add_argument("--out", type=Path, default=None)
    _add_format_args(extract_p)

    key_p = sub.add_parser("set-key", help="Store the OCR API key")
    key_p.add_argument("key")
    sub.add_parser("clear-key", help="Forget the stored OCR API key")

    hist_p = sub.add_parser("history", help="Inspect past extractions")
    hist_sub = hist_p.add_subparsers(dest="history_cmd", required=True)
    hist_sub.add_parser("list")
    show_p = hist_sub.add_parser("show", help="Restore one entry")
    show_p.add_argument("id", type=int)
    show_p.add_argument("--out", type=Path, default=None)
    _add_format_args(show_p)
    delete_p = hist_sub.add_parser("delete")
    delete_p.add_argument("id", type=int)
    hist_sub.add_parser("clear")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        store = FileStore(args.home)
    except OSError as e:
        print(str(e), file=sys.stderr)
        return 2

    if args.cmd == "set-key":
        if not args.key.strip():
            print("API key must not be empty", file=sys.stderr)
            return 2
        try:
            store.set(API_KEY_KEY, args.key.strip())
        except OSError as e:
            print(str(e), file=sys.stderr)
            return 2
        return 0

    if args.cmd == "clear-key":
        try:
            store.remove(API_KEY_KEY)
        except OSError as e:
            print(str(e), file=sys.stderr)
            return 2
        return 0

    history = HistoryCache(store)
    history.load()

    if args.cmd == "extract":
        api_key = args.api_key or settings.api_key or store.get(API_KEY_KEY)
        session = requests.Session()
        client = OcrClient(session, api_url=args.api_url, timeout_s=args.timeout)
        try:
            image_data_url = read_image_data_url(args.image)
            outcome = extract_image(
                client,
                history,
                api_key=api_key,
                model=args.model,
                image_data_url=image_data_url,
                image_label=args.label or args.image.name,
                escape_alt=bool(args.escape_alt),
            )
        except (InputValidationError, OSError) as e:
            print(str(e), file=sys.stderr)
            return 2
        finally:
            session.close()

        if outcome.status is ExtractionStatus.FAILED:
            print(outcome.message, file=sys.stderr)
            print(outcome.result, file=sys.stderr)
            return 3
        if outcome.status is ExtractionStatus.EMPTY:
            print(outcome.message, file=sys.stderr)
            return 1

        try:
            _emit(_render(outcome.result, fmt=args.fmt), args.out)
        except OSError as e:
            print(str(e), file=sys.stderr)
            return 2
        return 0

    if args.cmd == "history":
        if args.history_cmd == "list":
            for entry in history.entries:
                print(_format_entry_line(entry))
            return 0

        if args.history_cmd == "show":
            entry = history.restore(args.id)
            if entry is None:
                print(f"history: no entry with id {args.id}", file=sys.stderr)
                return 4
            content = _render(entry.normalized_result, fmt=args.fmt)
            if not content.strip():
                print("history: nothing to show", file=sys.stderr)
                return 1
            try:
                _emit(content, args.out)
            except OSError as e:
                print(str(e), file=sys.stderr)
                return 2
            return 0

        if args.history_cmd == "delete":
            if history.restore(args.id) is None:
                print(f"history: no entry with id {args.id}", file=sys.stderr)
                return 4
            try:
                remaining = history.remove(args.id)
            except OSError as e:
                print(str(e), file=sys.stderr)
                return 2
            print(f"history: deleted {args.id} ({len(remaining)} left)")
            return 0

        if args.history_cmd == "clear":
            try:
                history.clear()
            except OSError as e:
                print(str(e), file=sys.stderr)
                return 2
            print("history: cleared")
            return 0

    return 2

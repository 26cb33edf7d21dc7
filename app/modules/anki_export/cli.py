from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from app.core.config import settings
from app.core.logging import get_logger, setup_logging
from app.modules.anki_export.anki_connect import AnkiConnectClient, AnkiConnectError
from app.modules.anki_export.deck_setup import FSRS_MANUAL_STEPS, setup_from_export_dir
from app.modules.anki_export.export import ExportOptions, write_export_package
from app.modules.anki_export.models.cards import Difficulty
from app.modules.anki_export.pipeline import (
    PipelineConfig,
    PipelineResult,
    classify_content,
    hint_content,
    render_cards_csv,
    run_pipeline,
)

logger = get_logger(__name__)

_LABELS = {
    Difficulty.EASY: "Easy (E)",
    Difficulty.MEDIUM: "Medium (M)",
    Difficulty.DIFFICULT: "Difficult (D)",
}


def _read_input(path: str) -> str:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Input file not found: {p}")
    return p.read_text(encoding="utf-8")


def _default_output(input_path: str, suffix: str) -> Path:
    p = Path(input_path)
    return p.with_name(f"{p.stem}{suffix}.csv")


def _print_human(result: PipelineResult) -> None:
    print("=== Deck Summary ===")
    print(f"attempted: {result.attempted}")
    print(f"accepted:  {result.accepted}")
    print(f"skipped:   {result.skipped}")
    print(f"hinted:    {result.hinted}")
    for d in Difficulty:
        count = getattr(result.stats, d.value)
        print(f"   {_LABELS[d]:<14} {count} ({result.stats.percent(d):.1f}%)")


def _report(result: PipelineResult, as_json: bool, extra: dict | None = None) -> None:
    if as_json:
        print(json.dumps({**result.summary(), **(extra or {})}, indent=2, ensure_ascii=False))
        return
    _print_human(result)
    for key, value in (extra or {}).items():
        print(f"{key}: {value}")


def _pipeline_config(args: argparse.Namespace, keep_default: bool) -> PipelineConfig:
    keep = keep_default
    if getattr(args, "reclassify", False):
        keep = False
    return PipelineConfig(has_header=not args.no_header, keep_existing_difficulty=keep)


def _cmd_classify(args: argparse.Namespace) -> int:
    content = _read_input(args.input)
    text, result = classify_content(content, _pipeline_config(args, keep_default=False))
    out = Path(args.output) if args.output else _default_output(args.input, "-classified")
    out.write_text(text, encoding="utf-8")
    _report(result, args.json, {"output": str(out)})
    return 0


def _cmd_hints(args: argparse.Namespace) -> int:
    content = _read_input(args.input)
    text, result = hint_content(content, _pipeline_config(args, keep_default=True))
    out = Path(args.output) if args.output else _default_output(args.input, "-with-hints")
    out.write_text(text, encoding="utf-8")
    _report(result, args.json, {"output": str(out)})
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    content = _read_input(args.input)
    result = run_pipeline(content, _pipeline_config(args, keep_default=True))
    options = ExportOptions.from_settings(settings.deck)
    package = write_export_package(
        result.cards, args.output_dir or settings.deck.export_dir, options
    )
    _report(
        result,
        args.json,
        {"output_dir": str(package.output_dir), "preset": package.deck_config.preset},
    )
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    content = _read_input(args.input)
    result = run_pipeline(content, _pipeline_config(args, keep_default=False))

    classified = _default_output(args.input, "-classified")
    classified.write_text(render_cards_csv(result.cards, include_hint=False), encoding="utf-8")
    hinted = _default_output(args.input, "-with-hints")
    hinted.write_text(render_cards_csv(result.cards, include_hint=True), encoding="utf-8")

    options = ExportOptions.from_settings(settings.deck)
    package = write_export_package(
        result.cards, args.output_dir or settings.deck.export_dir, options
    )
    _report(
        result,
        args.json,
        {
            "classified": str(classified),
            "hinted": str(hinted),
            "output_dir": str(package.output_dir),
            "preset": package.deck_config.preset,
        },
    )
    return 0


def _cmd_setup(args: argparse.Namespace) -> int:
    client = AnkiConnectClient(
        args.url or settings.anki.url,
        timeout_ms=args.timeout_ms or settings.anki.timeout_ms,
        batch_size=args.batch_size or settings.anki.batch_size,
    )
    logger.info(
        "AnkiConnect URL: %s | batch size: %d | timeout: %dms",
        client.url,
        client.batch_size,
        client.timeout_ms,
    )
    options = ExportOptions.from_settings(settings.deck)
    export_dir = args.export_dir or settings.deck.export_dir
    try:
        result = asyncio.run(setup_from_export_dir(client, export_dir, options))
    except AnkiConnectError as exc:
        logger.error("%s", exc)
        logger.error(
            "Check that Anki is open, AnkiConnect (2055492159) is installed "
            "and listening on %s",
            client.url,
        )
        return 1

    summary = result.import_summary
    if args.json:
        print(
            json.dumps(
                {
                    "anki_version": result.anki_version,
                    "note_type_created": result.note_type_created,
                    "attempted": summary.attempted,
                    "added": summary.added,
                    "duplicates": summary.duplicates,
                },
                indent=2,
            )
        )
    else:
        print("=== Anki Setup ===")
        print(f"attempted:  {summary.attempted}")
        print(f"added:      {summary.added}")
        print(f"duplicates: {summary.duplicates}")
        print("Enable FSRS manually:")
        for i, step in enumerate(FSRS_MANUAL_STEPS, start=1):
            print(f"   {i}. {step}")
    return 0


def _add_input_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("input", help="Path to the deck CSV")
    p.add_argument("--no-header", action="store_true", help="Input has no header line")
    p.add_argument("--json", action="store_true", help="Output JSON summary")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anki-export", description="FSRS flashcard export pipeline"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    c = sub.add_parser("classify", help="Add the difficulty column (E/M/D)")
    _add_input_args(c)
    c.add_argument("--output", "-o", help="Output CSV (default: <input>-classified.csv)")

    h = sub.add_parser("hints", help="Classify and add hints to difficult cards")
    _add_input_args(h)
    h.add_argument("--output", "-o", help="Output CSV (default: <input>-with-hints.csv)")
    h.add_argument(
        "--reclassify",
        action="store_true",
        help="Ignore difficulties already present in the input",
    )

    e = sub.add_parser("export", help="Write the Anki export package")
    _add_input_args(e)
    e.add_argument("--output-dir", help="Package directory (default: ANKI_EXPORT_DIR)")
    e.add_argument(
        "--reclassify",
        action="store_true",
        help="Ignore difficulties already present in the input",
    )

    r = sub.add_parser("run", help="Classify, add hints and write the export package in one pass")
    _add_input_args(r)
    r.add_argument("--output-dir", help="Package directory (default: ANKI_EXPORT_DIR)")

    s = sub.add_parser("setup", help="Create note type and deck in Anki and import cards")
    s.add_argument("--export-dir", help="Package directory (default: ANKI_EXPORT_DIR)")
    s.add_argument("--url", help="AnkiConnect URL (default: ANKI_CONNECT_URL)")
    s.add_argument("--batch-size", type=int, help="Notes per addNotes call")
    s.add_argument("--timeout-ms", type=int, help="Request timeout in milliseconds")
    s.add_argument("--json", action="store_true", help="Output JSON summary")

    return parser


_COMMANDS = {
    "classify": _cmd_classify,
    "hints": _cmd_hints,
    "export": _cmd_export,
    "run": _cmd_run,
    "setup": _cmd_setup,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level:
        setup_logging(args.log_level)

    handler = _COMMANDS.get(args.cmd)
    if handler is None:
        parser.print_help()
        return 2
    try:
        return handler(args)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

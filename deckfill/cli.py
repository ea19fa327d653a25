"""CLI entry point for deckfill."""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .author.builder import build_template
from .author.inspector import inspect_package
from .config import load_config
from .layouts.resolver import select_resolver
from .logging_utils import log_event
from .models.authoring import TemplateDefinition
from .models.config import Config
from .models.content import ContentSlideRecord, GenerationOptions
from .models.template import TemplateSource
from .normalize.parser import load_records_json, parse_slides
from .package.store import Package
from .render.generator import DeckGenerator
from .templates.store import TemplateStore
from .validate.template_check import check_template

# Template, manifest and pydantic validation errors all derive from ValueError.
_FAILURES = (ValueError, OSError)


def _generate_run_id() -> str:
    """Generate a timestamp-based run ID."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--project-root",
        type=str,
        default=None,
        help="Path to project root (default: auto-detect)",
    )


def _add_template_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--template-id", type=str, default=None,
        help="Stored template id (default: configured default template)",
    )
    parser.add_argument(
        "--template", type=str, default=None,
        help="Path to a PPTX template; its layouts are discovered, not read from the manifest",
    )


def _config(args: argparse.Namespace) -> Config:
    return load_config(Path(args.project_root) if args.project_root else None)


def _template_source(args: argparse.Namespace, config: Config) -> TemplateSource:
    if getattr(args, "template", None):
        return TemplateStore.from_path(Path(args.template))
    return TemplateStore(config).load(getattr(args, "template_id", None))


def _load_records(path: Path, deck_title: str) -> List[ContentSlideRecord]:
    if path.suffix.lower() == ".json":
        return load_records_json(path)
    return parse_slides(path, deck_title)


def cmd_author(args: argparse.Namespace) -> int:
    """Build a template from a layout definition and store it."""
    try:
        config = _config(args)
        definition_path = (
            Path(args.definition)
            if args.definition
            else Path(config.layouts_dir) / f"{config.default_template_id}.json"
        )
        definition = TemplateDefinition.from_json_file(definition_path)
        authored = build_template(definition)
        path = TemplateStore(config).save(authored, args.template_id)
    except _FAILURES as exc:
        print(f"ERROR: {exc}")
        return 1

    print(f"Authored {len(authored.manifest.layouts)} layouts to: {path}")
    for layout in authored.manifest.layouts:
        print(f"  - {layout.name} (slide {layout.source_slide_number}): {', '.join(layout.tags)}")
    return 0


def cmd_layouts(args: argparse.Namespace) -> int:
    """List the layouts generation would resolve for a template."""
    try:
        config = _config(args)
        source = _template_source(args, config)
        resolver = select_resolver(source.manifest)
        layouts = resolver.resolve(Package.from_bytes(source.data))
    except _FAILURES as exc:
        print(f"ERROR: {exc}")
        return 1

    if args.json:
        print(json.dumps([layout.to_dict() for layout in layouts], indent=2, sort_keys=True))
        return 0
    print(f"Resolved {len(layouts)} layouts ({resolver.kind}):")
    for layout in layouts:
        marker = " [default]" if layout.is_default else ""
        print(f"  {layout.source_slide_number}: {layout.name}{marker}")
        for placeholder in layout.placeholders:
            print(f"      {placeholder.type} idx={placeholder.idx} tag={placeholder.tag}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        config = _config(args)
        source = _template_source(args, config)
    except _FAILURES as exc:
        print(f"ERROR: {exc}")
        return 1

    report = check_template(source.data, source.manifest)
    for issue in report.issues:
        print(f"{issue.severity.upper()}: [{issue.code}] {issue.message}")
    if not report.is_valid:
        return 1
    print("Template validation passed.")
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate a deck from slide Markdown or JSON records."""
    input_path = Path(args.input)
    if not input_path.exists():
        print(f"ERROR: Slide input not found: {input_path}")
        return 1

    try:
        config = _config(args)
        title = args.title or input_path.stem.replace("_", " ").replace("-", " ").title()
        records = _load_records(input_path, title)
        options = GenerationOptions(title=title, subtitle=args.subtitle, date=args.date)
        source = _template_source(args, config)
    except _FAILURES as exc:
        print(f"ERROR: {exc}")
        return 1
    if not records:
        print(f"ERROR: No slides found in {input_path}")
        return 1

    run_id = args.run_id if args.run_id else _generate_run_id()
    run_dir = Path(config.runs_dir) / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    log_path = run_dir / "run_log.jsonl"
    log_event(log_path, "RECORDS_LOADED", {"path": str(input_path), "record_count": len(records)})

    output_path = run_dir / "deck.pptx"
    try:
        report = DeckGenerator(source, log_path=log_path).render(records, options, output_path)
    except _FAILURES as exc:
        log_event(log_path, "GENERATE_FAILED", {"error": str(exc)})
        print(f"ERROR: {exc}")
        return 1

    report_path = run_dir / "generation_report.json"
    with open(report_path, "w", encoding="utf-8") as handle:
        handle.write(report.to_json(indent=2))

    print(f"Generated {report.slide_count} of {report.record_count} slides to: {output_path}")
    for skipped in report.skipped:
        print(f"WARNING: record {skipped.record_index} skipped: {skipped.reason}")
    print(f"Generation report saved to: {report_path}")
    print(f"Run artifacts in: {run_dir}")
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    path = Path(args.pptx)
    try:
        summary = inspect_package(path.read_bytes())
    except _FAILURES as exc:
        print(f"ERROR: {exc}")
        return 1
    print(summary.to_json(indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="deckfill - template-driven PPTX generator")
    subparsers = parser.add_subparsers(dest="command", required=True)

    author_parser = subparsers.add_parser(
        "author", help="Build a tagged template from a layout definition"
    )
    _add_common_args(author_parser)
    author_parser.add_argument(
        "--definition", type=str, default=None,
        help="Template definition JSON (default: assets/layouts/<default template>.json)",
    )
    author_parser.add_argument(
        "--template-id", type=str, default=None, help="Store under this id instead"
    )
    author_parser.set_defaults(func=cmd_author)

    layouts_parser = subparsers.add_parser("layouts", help="List resolved template layouts")
    _add_common_args(layouts_parser)
    _add_template_args(layouts_parser)
    layouts_parser.add_argument("--json", action="store_true", help="Print layouts as JSON")
    layouts_parser.set_defaults(func=cmd_layouts)

    validate_parser = subparsers.add_parser(
        "validate", help="Check a template and its layout manifest"
    )
    _add_common_args(validate_parser)
    _add_template_args(validate_parser)
    validate_parser.set_defaults(func=cmd_validate)

    generate_parser = subparsers.add_parser(
        "generate", help="Generate a deck from slide Markdown or JSON records"
    )
    _add_common_args(generate_parser)
    _add_template_args(generate_parser)
    generate_parser.add_argument(
        "--input", type=str, required=True, help="Slide Markdown (.md) or records JSON (.json)"
    )
    generate_parser.add_argument("--title", type=str, default=None, help="Deck title")
    generate_parser.add_argument("--subtitle", type=str, default=None, help="Deck subtitle")
    generate_parser.add_argument("--date", type=str, default=None, help="Deck date text")
    generate_parser.add_argument(
        "--run-id", type=str, default=None, help="Run ID (default: auto-generated timestamp)"
    )
    generate_parser.set_defaults(func=cmd_generate)

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a PPTX file")
    inspect_parser.add_argument("--pptx", type=str, required=True, help="Path to a PPTX file")
    inspect_parser.set_defaults(func=cmd_inspect)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())

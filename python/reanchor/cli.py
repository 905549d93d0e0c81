import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from reanchor import __version__
from reanchor.config import LOG_FORMAT, LOG_LEVEL, configure_logging
from reanchor.ingest import read_paragraphs
from reanchor.markup import render_markup
from reanchor.models import RevisionRequest
from reanchor.prompt import ModelResponseError, build_system_prompt, build_user_message, parse_model_response
from reanchor.validation import resolve_revision


def _load_request(path: Path) -> RevisionRequest:
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return RevisionRequest.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        print(f"Error parsing request {path}: {e}", file=sys.stderr)
        sys.exit(1)


def _write_output(text: str, output: Path = None):
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"Saved to {output}", file=sys.stderr)
    else:
        print(text)


def handle_extract(args):
    if not args.input.exists():
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    try:
        paragraphs = read_paragraphs(args.input)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    data = [p.model_dump() for p in paragraphs]
    _write_output(json.dumps(data, indent=2, ensure_ascii=False), args.output)


def handle_prompt(args):
    request = _load_request(args.request)
    try:
        user_message = build_user_message(request)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    print(build_system_prompt(request.subset_scope))
    print("\n---\n")
    print(user_message)


def handle_resolve(args):
    request = _load_request(args.request)

    if args.response:
        try:
            with open(args.response, "r", encoding="utf-8") as f:
                request.proposed_edits = parse_model_response(f.read())
        except (OSError, ModelResponseError) as e:
            print(f"Error reading model response: {e}", file=sys.stderr)
            sys.exit(1)

    result = resolve_revision(request)

    if args.markup:
        rendered = render_markup(request.paragraphs, result.edits)
        text = "\n\n".join(p.text for p in rendered)
    else:
        payload: Dict[str, Any] = result.to_wire(include_stats=args.stats)
        text = json.dumps(payload, indent=2, ensure_ascii=False)

    _write_output(text, args.output)
    stats = result.stats
    print(
        f"Stats: {stats.accepted} accepted, {stats.repaired} repaired, "
        f"{stats.remapped} remapped, {stats.dropped} dropped.",
        file=sys.stderr,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(prog="reanchor", description="Reanchor: ground model-proposed edits in real text")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Log resolver decisions (debug level)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines on stderr")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    p_extract = subparsers.add_parser("extract", help="Extract paragraphs from a DOCX or text file as JSON")
    p_extract.add_argument("input", type=Path, help="Input DOCX or text file")
    p_extract.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    p_extract.set_defaults(func=handle_extract)

    p_prompt = subparsers.add_parser("prompt", help="Print the model prompt for a revision request")
    p_prompt.add_argument("request", type=Path, help="Revision request JSON")
    p_prompt.set_defaults(func=handle_prompt)

    p_resolve = subparsers.add_parser("resolve", help="Anchor proposed edits against the request's paragraphs")
    p_resolve.add_argument("request", type=Path, help="Revision request JSON")
    p_resolve.add_argument("--response", type=Path, help="Raw model output to take proposed edits from")
    p_resolve.add_argument("--markup", action="store_true", help="Print a CriticMarkup preview instead of JSON")
    p_resolve.add_argument("--stats", action="store_true", help="Include validation counts in the JSON output")
    p_resolve.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    p_resolve.set_defaults(func=handle_resolve)

    args = parser.parse_args(argv)
    configure_logging(
        level="DEBUG" if args.verbose else LOG_LEVEL,
        fmt="json" if args.json_logs else LOG_FORMAT,
    )
    args.func(args)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Photoplot command-line tool.

Measure or convert documents described by YAML document files.

Usage:
    python -m photoplot bbox board.yaml
    python -m photoplot bbox board.yaml --ignore-blank
    python -m photoplot convert board.yaml --unit mm --integer 3 --decimal 4 -o board_mm.yaml
    python -m photoplot --config site.yaml --log-level DEBUG bbox board.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import yaml

from photoplot.configs.loader import load_config
from photoplot.errors import GerberError
from photoplot.gerber import GerberDocument
from photoplot.files.document_file import document_to_dict, load_document, save_document
from photoplot.utils.logging_config import pop_context, push_context, setup_logging

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photoplot",
        description="Bounding boxes and format/unit conversion for Gerber documents",
    )
    parser.add_argument("--config", help="Configuration YAML (defaults are shipped)")
    parser.add_argument("--log-level", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Override the configured log level")
    parser.add_argument("--json-logs", action="store_true", help="Log JSON lines")

    sub = parser.add_subparsers(dest="command", required=True)

    bbox = sub.add_parser("bbox", help="Print the bounding box of a document")
    bbox.add_argument("file", help="Document YAML file")
    bbox.add_argument("--ignore-blank", action="store_true",
                      help="Leave blank apertures out of the box")
    bbox.add_argument("--json", action="store_true", help="Print the box as JSON")

    conv = sub.add_parser("convert", help="Convert a document to another format/unit")
    conv.add_argument("file", help="Document YAML file")
    conv.add_argument("--unit", required=True, help="Target unit (inch, mm)")
    conv.add_argument("--integer", type=int, required=True, help="Target integer digits")
    conv.add_argument("--decimal", type=int, required=True, help="Target decimal digits")
    conv.add_argument("--zero", default="L", help="Target zero suppression (default: L)")
    conv.add_argument("--coordinates", default="A",
                      help="Target coordinate mode (default: A)")
    conv.add_argument("-o", "--output", help="Output YAML file (default: stdout)")

    return parser


def _cmd_bbox(args: argparse.Namespace, doc: GerberDocument) -> int:
    if args.ignore_blank:
        doc.ignore_blank(True)
    box = doc.bounding_box()
    unit = doc.format_spec.values.effective_unit.value
    if args.json:
        print(json.dumps({
            "min_x": box.min_x, "min_y": box.min_y,
            "max_x": box.max_x, "max_y": box.max_y,
            "width": box.width, "height": box.height,
            "unit": unit,
            "unresolved_apertures": sorted(box.unresolved_apertures),
        }))
    else:
        print(f"min: ({box.min_x:g}, {box.min_y:g})  max: ({box.max_x:g}, {box.max_y:g})")
        print(f"size: {box.width:g} x {box.height:g} {unit}")
        if not box.exact:
            print(f"approximate: macro apertures {', '.join(sorted(box.unresolved_apertures))}")
    return 0


def _cmd_convert(args: argparse.Namespace, doc: GerberDocument, cfg) -> int:
    target = GerberDocument.from_config(cfg, name=args.output)
    target.ignore_invalid(doc.ignore_invalid())
    target.set_format(
        zero=args.zero,
        coordinates=args.coordinates,
        format={"integer": args.integer, "decimal": args.decimal},
        unit=args.unit,
    )
    doc.convert(target)
    if args.output:
        save_document(target, args.output)
    else:
        print(yaml.safe_dump(document_to_dict(target), sort_keys=False), end="")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config)
    except (GerberError, FileNotFoundError, yaml.YAMLError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    setup_logging(
        args.log_level or cfg.logging.level,
        cfg.logging.file,
        json=args.json_logs or cfg.logging.json,
    )
    push_context(doc=args.file)
    try:
        doc = load_document(args.file, config=cfg)
        if args.command == "bbox":
            return _cmd_bbox(args, doc)
        return _cmd_convert(args, doc, cfg)
    except (GerberError, FileNotFoundError, yaml.YAMLError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        pop_context(keys=["doc"])


if __name__ == "__main__":
    sys.exit(main())

"""Command-line entry point: load a DOCX file, validate it and optionally dump it."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from docx_engine.errors import DocxError
from docx_engine.model.elements import Document
from docx_engine.parser.docx_reader import DocxReader
from docx_engine.utils.debug import DebugDumper
from docx_engine.utils.logger import get_logger, set_log_level
from docx_engine.utils.units import twips_to_points
from docx_engine.utils.validator import DocxValidator

LOGGER = get_logger(__name__)


def build_document(docx_path: Path) -> Document:
    """Read a DOCX package into the immutable document model."""
    return DocxReader().load_path(docx_path)


def summarize(document: Document) -> str:
    section = document.section
    lines = [
        f"nodes: {len(document.nodes)}",
        f"paragraphs: {len(document.paragraphs)}",
        f"embedded fonts: {len(document.fonts)}",
        f"sections: {len(document.sections)}",
    ]
    if section is not None:
        lines.append(f"page: {section.page_size} {section.orientation} ({twips_to_points(section.page_width):g}x{twips_to_points(section.page_height):g} pt)")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Read a DOCX file into a resolved document model")
    parser.add_argument("docx_file", help="Path to the input .docx file")
    parser.add_argument("--json", dest="json_path", help="Write the document model as JSON to this path")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    args = parser.parse_args(argv)

    if args.verbose:
        set_log_level(logging.DEBUG)

    docx_path = Path(args.docx_file).resolve()
    if not docx_path.exists():
        LOGGER.error("DOCX file not found: %s", docx_path)
        return 2

    LOGGER.info("Reading %s", docx_path.name)
    try:
        document = build_document(docx_path)
    except DocxError as exc:
        LOGGER.error("Cannot read %s: %s", docx_path.name, exc)
        return 2

    print(summarize(document))
    validator = DocxValidator()
    valid = validator.validate(document)
    for message in validator.warnings:
        print(f"warning: {message}")
    for message in validator.errors:
        print(f"error: {message}")

    if args.json_path:
        output = DebugDumper(Path(args.json_path)).dump(document)
        LOGGER.info("Wrote document model to %s", output)

    return 0 if valid else 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""
Manifest parser (Layer 1: Raw Input → typed ManifestRows).

Converts a delimited localization sheet into a Manifest.

CSV Format:
    comp_name, layer_name, type, <locale>, <locale>, ...

Syntax Notes:
    - Standard CSV quoting: fields may be wrapped in "..." and contain the
      delimiter or line breaks; "" inside a quoted field is a literal quote
    - Any line-ending style (\\n, \\r\\n, \\r)
    - Reserved column names are matched case-insensitively and have aliases
      (rootName/comp_name, leafName/layer_name, kind/type)
    - Every other non-empty header is a locale, kept in header order
    - The root column may be left out when the caller names one master
      container for the whole sheet (`root_name`)
"""

import csv
import logging
import os
import re
from dataclasses import dataclass
from io import StringIO
from typing import Dict, List, Optional, Tuple

from locrep.errors import ManifestError, ManifestErrorReason
from locrep.model import LeafKind, Manifest, ManifestRow

logger = logging.getLogger(__name__)


ROOT_ALIASES = ("rootname", "root_name", "comp_name", "frame")
LEAF_ALIASES = ("leafname", "leaf_name", "layer_name", "node_name")
KIND_ALIASES = ("kind", "type")
RESERVED_COLUMNS = frozenset(ROOT_ALIASES + LEAF_ALIASES + KIND_ALIASES)

_BOM = "\ufeff"
_SUFFIX_RE = re.compile(r"[^a-z0-9]")
_LABEL_RE = re.compile(r"[^A-Z0-9\-]")


def is_reserved(header: str) -> bool:
    return header.strip().lower() in RESERVED_COLUMNS


def detect_locales(headers: List[str]) -> List[str]:
    """
    Return every header that is not a reserved column, in header order.

    Args:
        headers: Trimmed header cells

    Returns:
        Locale identifiers (opaque strings)

    Raises:
        ManifestError(NO_LOCALE_COLUMNS): If no locale column remains
    """
    locales = [h for h in headers if h and not is_reserved(h)]
    if not locales:
        raise ManifestError(
            ManifestErrorReason.NO_LOCALE_COLUMNS,
            f"no locale columns found; expected headers beyond {', '.join(sorted(RESERVED_COLUMNS))}",
        )
    return locales


def locale_suffix(locale: str) -> str:
    """Name suffix for duplicates: `en-US` -> `en_us`."""
    return _SUFFIX_RE.sub("_", locale.lower())


def locale_label(locale: str) -> str:
    """Folder label for a locale: `en-US` -> `EN-US`."""
    return _LABEL_RE.sub("_", locale.upper())


def split_records(raw_text: str) -> Tuple[List[str], List[Tuple[int, List[str]]]]:
    """
    Split raw manifest text into a header and data records.

    The first non-empty record is the header. Blank records are skipped.
    Every field is trimmed.

    Returns:
        (headers, [(line_number, fields), ...])
    """
    if raw_text.startswith(_BOM):
        raw_text = raw_text[len(_BOM):]

    reader = csv.reader(StringIO(raw_text, newline=""), skipinitialspace=True)
    headers: Optional[List[str]] = None
    records: List[Tuple[int, List[str]]] = []

    for fields in reader:
        cells = [f.strip() for f in fields]
        if not any(cells):
            continue
        if headers is None:
            headers = cells
            continue
        records.append((reader.line_num, cells))

    if headers is None:
        raise ManifestError(ManifestErrorReason.MALFORMED_ROW, "manifest is empty")
    return headers, records


@dataclass
class _ColumnMap:
    """Positions of the reserved columns inside the header."""
    root: Optional[int]
    leaf: int
    kind: Optional[int]
    locales: Dict[str, int]


def _find_column(headers: List[str], aliases: Tuple[str, ...]) -> Optional[int]:
    for index, header in enumerate(headers):
        if header.lower() in aliases:
            return index
    return None


def _map_columns(headers: List[str], locales: List[str], root_given: bool = False) -> _ColumnMap:
    root = _find_column(headers, ROOT_ALIASES)
    leaf = _find_column(headers, LEAF_ALIASES)
    missing = []
    if root is None and not root_given:
        missing.append("rootName/comp_name")
    if leaf is None:
        missing.append("leafName/layer_name")
    if missing:
        raise ManifestError(
            ManifestErrorReason.MALFORMED_ROW,
            f"missing required columns: {', '.join(missing)}",
            line=1,
        )
    repeated = sorted({locale for locale in locales if locales.count(locale) > 1})
    if repeated:
        raise ManifestError(
            ManifestErrorReason.MALFORMED_ROW,
            f"locale columns appear more than once: {', '.join(repeated)}",
            line=1,
        )
    return _ColumnMap(
        root=root,
        leaf=leaf,
        kind=_find_column(headers, KIND_ALIASES),
        locales={locale: headers.index(locale) for locale in locales},
    )


def _build_row(cells: List[str], columns: _ColumnMap, width: int, line: int, default_kind: str,
               root_name: Optional[str] = None) -> ManifestRow:
    if len(cells) > width:
        logger.warning("Line %d has %d fields, header has %d; extra fields dropped", line, len(cells), width)
        cells = cells[:width]
    elif len(cells) < width:
        cells = cells + [""] * (width - len(cells))

    if columns.root is not None:
        root_name = cells[columns.root]
    leaf_name = cells[columns.leaf]
    if not root_name or not leaf_name:
        raise ManifestError(ManifestErrorReason.MALFORMED_ROW, "root and leaf names are required", line=line)

    raw_kind = cells[columns.kind] if columns.kind is not None else ""
    kind = LeafKind.parse(raw_kind, default=default_kind)
    if kind is None:
        raise ManifestError(ManifestErrorReason.MALFORMED_ROW, f"unknown kind '{raw_kind}'", line=line)

    values = {locale: cells[index] for locale, index in columns.locales.items()}
    return ManifestRow(root_name=root_name, leaf_name=leaf_name, kind=kind, values=values, line=line)


def parse_manifest_string(raw_text: str, default_kind: str = "text", source: Optional[str] = None,
                          root_name: Optional[str] = None) -> Manifest:
    """
    Parse manifest text into a Manifest.

    Args:
        raw_text: Full manifest content
        default_kind: Kind used when a row's kind cell is empty or absent
        source: Path the text came from, if any
        root_name: Master container for every row when the header has no
            root column (single-master sheets: layer_name, type, locales)

    Returns:
        Manifest with headers, locales and typed rows

    Raises:
        ManifestError: If the header has no locale columns, lacks a required
            column, repeats a locale, or a row is malformed
    """
    headers, records = split_records(raw_text)
    locales = detect_locales(headers)
    columns = _map_columns(headers, locales, root_given=bool(root_name))

    rows = [
        _build_row(cells, columns, len(headers), line, default_kind, root_name)
        for line, cells in records
    ]
    logger.info("Manifest: %d row(s), locales: %s", len(rows), ", ".join(locales))
    return Manifest(headers=headers, locales=locales, rows=rows, source=source)


def parse_manifest_file(filepath: str, default_kind: str = "text", root_name: Optional[str] = None) -> Manifest:
    """
    Parse a manifest file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ManifestError: If parsing fails
    """
    try:
        with open(filepath, "r", encoding="utf-8", newline="") as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Manifest file not found: {filepath}")

    return parse_manifest_string(
        content, default_kind=default_kind, source=os.path.abspath(filepath), root_name=root_name
    )


__all__ = [
    "RESERVED_COLUMNS",
    "detect_locales",
    "locale_suffix",
    "locale_label",
    "split_records",
    "parse_manifest_string",
    "parse_manifest_file",
]

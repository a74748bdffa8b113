"""Row sources: CSV and YAML readers yielding raw registry rows.

The compiler only needs an ordered iterable of mappings keyed by the
registry's column names.  How the rows are stored is decided here.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from iana_ports.errors import SchemaViolationError, SourceUnavailableError

logger = logging.getLogger(__name__)

BUNDLED_SOURCE_NAME = "service-names-port-numbers.csv"

_CSV_SUFFIXES = frozenset({".csv"})
_YAML_SUFFIXES = frozenset({".yaml", ".yml"})

Row = Mapping[str, Any]


@runtime_checkable
class RowSource(Protocol):
    """Anything that can be iterated for registry rows in source order."""

    def __iter__(self) -> Iterator[Row]: ...


def bundled_source() -> Path:
    """Path of the registry excerpt shipped inside the package."""
    return Path(__file__).resolve().parent / "data" / BUNDLED_SOURCE_NAME


def _iter_csv(handle: Any, path: Path) -> Iterator[Row]:
    reader = csv.DictReader(handle)
    try:
        yield from reader
    except (csv.Error, UnicodeDecodeError) as exc:
        raise SourceUnavailableError(
            f"Could not read registry row {reader.line_num} from {path}: {exc}"
        ) from exc


@contextmanager
def open_csv_rows(path: str | Path) -> Iterator[Iterator[Row]]:
    """Open a registry CSV and yield a lazy row iterator.

    Rows are parsed on demand so that an early exit leaves the rest of
    the file unread.  The file is closed when the context exits.
    """
    path = Path(path)
    try:
        handle = open(path, encoding="utf-8-sig", newline="")
    except OSError as exc:
        raise SourceUnavailableError(f"Could not open registry source {path}: {exc}") from exc
    with handle:
        yield _iter_csv(handle, path)


def read_yaml_rows(path: str | Path) -> list[Row]:
    """Load a YAML file whose root is a list of row mappings."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise SourceUnavailableError(f"Could not open registry source {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SourceUnavailableError(f"Could not parse registry source {path}: {exc}") from exc

    if data is None:
        logger.warning("Registry source %s is empty", path)
        return []
    if not isinstance(data, list):
        raise SchemaViolationError(f"Registry YAML root must be a list of rows: {path}")
    return data


@contextmanager
def open_rows(path: str | Path) -> Iterator[Iterator[Row]]:
    """Open any supported registry file, dispatching on its suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in _CSV_SUFFIXES:
        with open_csv_rows(path) as rows:
            yield rows
    elif suffix in _YAML_SUFFIXES:
        yield iter(read_yaml_rows(path))
    else:
        raise SourceUnavailableError(
            f"Unsupported registry source type {suffix or '(none)'!r}: {path}"
        )

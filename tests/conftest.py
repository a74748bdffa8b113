"""Test fixtures for iana_ports tests."""

from __future__ import annotations

import csv
from pathlib import Path

import pytest

from iana_ports.loader import clear_default_registry

CSV_HEADER = [
    "Service Name",
    "Port Number",
    "Transport Protocol",
    "Description",
    "Assignee",
    "Contact",
    "Registration Date",
    "Modification Date",
    "Reference",
    "Service Code",
    "Unauthorized Use Reported",
    "Assignment Notes",
]


@pytest.fixture(autouse=True)
def _clear_default_registry(monkeypatch):
    """Drop the process-wide registry and env overrides around each test."""
    monkeypatch.delenv("IANA_PORTS_SOURCE", raising=False)
    monkeypatch.delenv("IANA_PORTS_PER_ROW_FILTER", raising=False)
    clear_default_registry()
    yield
    clear_default_registry()


def make_row(name: str, port: str, protocol: str = "", description: str = "") -> dict[str, str]:
    """Create one raw registry row the way csv.DictReader yields it."""
    row = {column: "" for column in CSV_HEADER}
    row["Service Name"] = name
    row["Port Number"] = port
    row["Transport Protocol"] = protocol
    row["Description"] = description
    return row


def sample_rows() -> list[dict[str, str]]:
    """The worked example: echo/tcp, echo/udp, ftp/tcp, then an out-of-range row."""
    return [
        make_row("echo", "7", "tcp"),
        make_row("echo", "7", "udp"),
        make_row("ftp", "21", "tcp"),
        make_row("http-alt", "8080", "tcp"),
    ]


def write_csv(path: Path, rows: list[dict[str, str]]) -> Path:
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_HEADER)
        writer.writeheader()
        writer.writerows(rows)
    return path

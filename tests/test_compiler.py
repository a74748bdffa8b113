"""Tests for the registry compiler."""

from __future__ import annotations

import logging

import pytest
from conftest import make_row, sample_rows

from iana_ports.compiler import RegistryBuild, compile_rows, validate_row
from iana_ports.errors import RegistryError, SchemaViolationError
from iana_ports.models import Service, TransportProtocol
from iana_ports.telemetry import REGISTRY_COMPILED, REGISTRY_HALTED, InMemoryTelemetrySink


class TestCompileRows:
    def test_worked_example(self):
        build = compile_rows(sample_rows())
        assert [str(s) for s in build.services] == ["echo/7/tcp", "echo/7/udp", "ftp/21/tcp"]
        assert build.by_port == {7: [0, 1], 21: [2]}
        assert build.by_name == {"echo": [0, 1], "ftp": [2]}
        assert build.halted_at_port == 8080

    def test_empty_input(self):
        build = compile_rows([])
        assert build.services == []
        assert build.by_port == {}
        assert build.by_name == {}
        assert build.rows_read == 0
        assert build.halted_at_port is None

    def test_empty_name_dropped(self):
        build = compile_rows([make_row("", "7", "tcp"), make_row("echo", "7", "tcp")])
        assert len(build.services) == 1
        assert build.rows_skipped == 1

    def test_bad_port_dropped(self):
        build = compile_rows([make_row("echo", "abc", "tcp"), make_row("ftp", "21", "tcp")])
        assert [s.name for s in build.services] == ["ftp"]
        assert build.rows_skipped == 1

    def test_oversized_port_cell_dropped(self):
        build = compile_rows([make_row("x", "1" * 5000, "tcp"), make_row("ftp", "21", "tcp")])
        assert [s.name for s in build.services] == ["ftp"]
        assert build.rows_skipped == 1

    def test_unknown_protocol_aborts(self):
        rows = [make_row("echo", "7", "tcp"), make_row("echo", "7", "quic")]
        with pytest.raises(SchemaViolationError, match="Row 2"):
            compile_rows(rows)

    def test_unknown_protocol_aborts_even_on_noise_row(self):
        with pytest.raises(SchemaViolationError):
            compile_rows([make_row("", "4", "quic")])

    def test_schema_violation_is_registry_error(self):
        with pytest.raises(RegistryError) as exc_info:
            compile_rows([make_row("echo", "7", "quic")])
        assert exc_info.value.row_number == 1

    def test_missing_column_aborts(self):
        with pytest.raises(SchemaViolationError):
            compile_rows([{"Service Name": "echo"}])

    def test_rows_after_halt_are_not_read(self):
        # A schema violation past the first out-of-range port is never seen.
        rows = [
            make_row("ftp", "21", "tcp"),
            make_row("blackjack", "1025", "tcp"),
            make_row("bogus", "7", "quic"),
        ]
        build = compile_rows(rows)
        assert [s.name for s in build.services] == ["ftp"]
        assert build.rows_read == 2

    def test_halt_consumes_lazily(self):
        consumed: list[int] = []

        def rows():
            for i, row in enumerate(sample_rows() + [make_row("late", "9", "tcp")]):
                consumed.append(i)
                yield row

        compile_rows(rows())
        assert consumed == [0, 1, 2, 3]

    def test_port_1023_kept_1024_halts(self):
        rows = [make_row("last", "1023", "tcp"), make_row("first", "1024", "tcp")]
        build = compile_rows(rows)
        assert [s.port for s in build.services] == [1023]
        assert build.halted_at_port == 1024

    def test_per_row_filter_keeps_later_rows(self):
        rows = [
            make_row("http-alt", "8080", "tcp"),
            make_row("ssh", "22", "tcp"),
        ]
        build = compile_rows(rows, stop_at_first_out_of_range=False)
        assert [s.name for s in build.services] == ["ssh"]
        assert build.halted_at_port is None
        assert build.rows_skipped == 1

    def test_duplicates_kept_as_distinct_positions(self):
        rows = [make_row("echo", "7", "tcp"), make_row("echo", "7", "tcp")]
        build = compile_rows(rows)
        assert len(build.services) == 2
        assert build.by_port[7] == [0, 1]
        assert build.by_name["echo"] == [0, 1]

    def test_order_is_source_order_not_key_order(self):
        rows = [make_row("zeta", "9", "udp"), make_row("alpha", "9", "tcp")]
        build = compile_rows(rows, stop_at_first_out_of_range=False)
        assert [s.name for s in build.services] == ["zeta", "alpha"]

    def test_protocol_optional(self):
        build = compile_rows([make_row("echo", "7", "")])
        assert build.services[0].transport_protocol is None

    def test_every_position_valid(self):
        build = compile_rows(sample_rows())
        for buckets in (build.by_port, build.by_name):
            for positions in buckets.values():
                assert positions
                assert all(0 <= p < len(build.services) for p in positions)

    def test_idempotent(self):
        assert compile_rows(sample_rows()) == compile_rows(sample_rows())

    def test_skipped_rows_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="iana_ports.compiler"):
            compile_rows([make_row("", "0", "tcp")])
        assert "Skipping row 1" in caplog.text


class TestCompilerTelemetry:
    def test_compiled_event(self):
        sink = InMemoryTelemetrySink()
        compile_rows(sample_rows(), telemetry=sink)
        (event,) = sink.named(REGISTRY_COMPILED)
        assert event.attributes["services"] == 3
        assert event.attributes["ports"] == 2
        assert event.attributes["names"] == 2
        assert event.attributes["rows_read"] == 4

    def test_halted_event(self):
        sink = InMemoryTelemetrySink()
        compile_rows(sample_rows(), telemetry=sink)
        (event,) = sink.named(REGISTRY_HALTED)
        assert event.attributes == {"row": 4, "port": 8080}

    def test_no_events_on_failure(self):
        sink = InMemoryTelemetrySink()
        with pytest.raises(SchemaViolationError):
            compile_rows([make_row("echo", "7", "quic")], telemetry=sink)
        assert sink.events == []


class TestRegistryBuild:
    def test_append_returns_position(self):
        build = RegistryBuild()
        assert build.append(Service(name="echo", port=7)) == 0
        assert build.append(Service(name="echo", port=7, transport_protocol="udp")) == 1
        assert build.by_port == {7: [0, 1]}

    def test_validate_row(self):
        row = validate_row(make_row("ssh", "22", "sctp"), 3)
        assert row.transport_protocol is TransportProtocol.SCTP

"""Tests for the index emitter and the frozen registry it produces."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest
from conftest import make_row, sample_rows

from iana_ports.compiler import compile_rows
from iana_ports.emitter import emit_registry, load_module, render_module, write_module
from iana_ports.errors import RegistryError, SourceUnavailableError
from iana_ports.models import TransportProtocol
from iana_ports.phf import PerfectHashMap


@pytest.fixture()
def registry():
    return emit_registry(compile_rows(sample_rows()))


class TestEmitRegistry:
    def test_canonical_tuple(self, registry):
        assert isinstance(registry.services, tuple)
        assert [str(s) for s in registry.services] == ["echo/7/tcp", "echo/7/udp", "ftp/21/tcp"]

    def test_indices_are_perfect_hash_maps(self, registry):
        assert isinstance(registry.port_index, PerfectHashMap)
        assert isinstance(registry.name_index, PerfectHashMap)

    def test_buckets_are_position_tuples(self, registry):
        assert registry.lookup_by_port(7) == (0, 1)
        assert registry.lookup_by_port(21) == (2,)
        assert registry.lookup_by_name("echo") == (0, 1)

    def test_absent_key_is_none(self, registry):
        assert registry.lookup_by_port(8080) is None
        assert registry.lookup_by_name("http-alt") is None

    def test_registry_is_frozen(self, registry):
        with pytest.raises(dataclasses.FrozenInstanceError):
            registry.services = ()

    def test_build_mutation_does_not_leak(self):
        build = compile_rows(sample_rows())
        registry = emit_registry(build)
        build.by_port[7].append(99)
        assert registry.lookup_by_port(7) == (0, 1)

    def test_empty_build(self):
        registry = emit_registry(compile_rows([]))
        assert len(registry) == 0
        assert list(registry.iter_all()) == []
        assert list(registry.by_port(7)) == []

    def test_idempotent(self):
        a = emit_registry(compile_rows(sample_rows()))
        b = emit_registry(compile_rows(sample_rows()))
        assert a == b
        assert a.port_index.entries == b.port_index.entries
        assert a.name_index.entries == b.name_index.entries


class TestGeneratedModule:
    def test_render_contains_tables(self, registry):
        source = render_module(registry)
        assert "SERVICES = (" in source
        assert "BY_PORT = PerfectHashMap(" in source
        assert "BY_NAME = PerfectHashMap(" in source
        assert "TransportProtocol.UDP" in source

    def test_write_and_load_round_trip(self, registry, tmp_path: Path):
        path = write_module(registry, tmp_path / "gen" / "services_table.py")
        loaded = load_module(path)
        assert loaded.services == registry.services
        assert loaded.port_index.seed == registry.port_index.seed
        assert [str(s) for s in loaded.by_port(7)] == ["echo/7/tcp", "echo/7/udp"]
        assert [str(s) for s in loaded.by_name("ftp")] == ["ftp/21/tcp"]
        assert len(loaded.by_port(8080)) == 0

    def test_quoting_survives(self, tmp_path: Path):
        rows = [make_row("it's \"odd\"\\", "7", ""), make_row("dccp-svc", "9", "dccp")]
        registry = emit_registry(compile_rows(rows))
        loaded = load_module(write_module(registry, tmp_path / "odd.py"))
        assert loaded.services[0].name == "it's \"odd\"\\"
        assert loaded.services[0].transport_protocol is None
        assert loaded.services[1].transport_protocol is TransportProtocol.DCCP
        assert list(loaded.by_name("it's \"odd\"\\")) == [loaded.services[0]]

    def test_empty_registry_module(self, tmp_path: Path):
        registry = emit_registry(compile_rows([]))
        loaded = load_module(write_module(registry, tmp_path / "empty.py"))
        assert len(loaded) == 0
        assert loaded.lookup_by_port(7) is None

    def test_load_missing_module(self, tmp_path: Path):
        with pytest.raises(SourceUnavailableError):
            load_module(tmp_path / "missing.py")

    def test_load_incomplete_module(self, tmp_path: Path):
        path = tmp_path / "partial.py"
        path.write_text("SERVICES = ()\n", encoding="utf-8")
        with pytest.raises(RegistryError, match="incomplete"):
            load_module(path)

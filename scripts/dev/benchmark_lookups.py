"""Microbenchmarks for registry lookups (linear scan and dict vs perfect hash)."""

from __future__ import annotations

import statistics
import time

from iana_ports.compiler import compile_rows
from iana_ports.emitter import emit_registry
from iana_ports.models import Service, TransportProtocol
from iana_ports.phf import PerfectHashMap
from iana_ports.registry import ServiceRegistry

_PROTOCOLS = [p.value for p in TransportProtocol]


def _synthetic_rows(ports: int = 1024, per_port: int = 4) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for port in range(ports):
        for i in range(per_port):
            rows.append({
                "Service Name": f"svc-{port}-{i % 2}",
                "Port Number": str(port),
                "Transport Protocol": _PROTOCOLS[i % len(_PROTOCOLS)],
            })
    return rows


def _time(label: str, fn, iterations: int) -> tuple[str, float]:
    samples: list[float] = []
    for _ in range(5):
        start = time.perf_counter()
        for _ in range(iterations):
            fn()
        elapsed = time.perf_counter() - start
        samples.append(elapsed / iterations)
    mean = statistics.mean(samples)
    print(f"{label:48s} {mean * 1_000_000:.2f} us/op")
    return label, mean


def bench_port_lookup(registry: ServiceRegistry) -> None:
    print("\n[1] Port lookup: linear scan vs perfect-hash bucket")
    targets = [7, 22, 80, 443, 1023]

    def baseline() -> int:
        return sum(
            1 for port in targets for s in registry.services if s.port == port
        )

    def optimized() -> int:
        return sum(len(registry.by_port(port)) for port in targets)

    if baseline() != optimized():
        raise RuntimeError("Port lookup mismatch between scan and index")

    _, baseline_mean = _time("baseline_linear_scan", baseline, iterations=50)
    _, optimized_mean = _time("perfect_hash_by_port", optimized, iterations=5000)
    print(f"speedup: {baseline_mean / optimized_mean:.2f}x")


def bench_name_lookup(registry: ServiceRegistry) -> None:
    print("\n[2] Name lookup: builtin dict vs perfect-hash map")
    as_dict = dict(registry.name_index)
    names = [f"svc-{p}-{p % 2}" for p in range(0, 1024, 7)] + ["missing", "HTTP"]

    def baseline() -> int:
        return sum(len(as_dict.get(n, ())) for n in names)

    def optimized() -> int:
        return sum(len(registry.lookup_by_name(n) or ()) for n in names)

    _time("builtin_dict_get", baseline, iterations=2000)
    _time("perfect_hash_get", optimized, iterations=2000)


def bench_construction() -> None:
    print("\n[3] Perfect-hash construction")
    keys = {f"name-{i}": (i,) for i in range(2000)}
    _time("perfect_hash_build_2000_str_keys", lambda: PerfectHashMap.from_mapping(keys), iterations=1)
    ports = {p: (p,) for p in range(1024)}
    _time("perfect_hash_build_1024_int_keys", lambda: PerfectHashMap.from_mapping(ports), iterations=1)


def main() -> None:
    print("iana-ports Lookup Benchmarks")
    registry = emit_registry(compile_rows(_synthetic_rows()))
    assert all(isinstance(s, Service) for s in registry.iter_all())
    bench_port_lookup(registry)
    bench_name_lookup(registry)
    bench_construction()


if __name__ == "__main__":
    main()

"""Registry configuration: where rows come from and how they are filtered.

A RegistryConfig is the one object a consuming program hands to
``compile_registry`` / ``default_registry``.  Without any configuration the
bundled excerpt of the IANA registry is compiled with the early-exit rule.

Example usage::

    config = RegistryConfig(
        source=Path("/srv/data/service-names-port-numbers.csv"),
        stop_at_first_out_of_range=True,
    )
    registry = compile_registry(config)

Environment overrides (read by ``RegistryConfig.from_env``)::

    IANA_PORTS_SOURCE=/path/to/registry.csv
    IANA_PORTS_PER_ROW_FILTER=1
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

SOURCE_ENV_VAR = "IANA_PORTS_SOURCE"
PER_ROW_FILTER_ENV_VAR = "IANA_PORTS_PER_ROW_FILTER"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class RegistryConfig:
    """Configuration for compiling a service registry.

    Attributes:
        source: Path to a CSV or YAML row file.  None means the dataset
            bundled with the package.
        stop_at_first_out_of_range: When True (the default) the first row
            with a port >= 1024 ends compilation, relying on the registry
            being sorted by port.  When False such rows are filtered one by
            one, which is required for unsorted sources.
    """

    source: Path | None = None
    stop_at_first_out_of_range: bool = True

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RegistryConfig:
        env = os.environ if environ is None else environ
        raw_source = env.get(SOURCE_ENV_VAR, "").strip()
        per_row = env.get(PER_ROW_FILTER_ENV_VAR, "").strip().lower() in _TRUTHY
        return cls(
            source=Path(raw_source) if raw_source else None,
            stop_at_first_out_of_range=not per_row,
        )

"""Reference registry of known schools, grouped by district and county."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from snowday.errors import ConfigurationError
from snowday.types import ReferenceSchool

log = structlog.get_logger()


@dataclass(frozen=True)
class Registry:
    """Immutable registry. `layout` keeps source order: district -> counties."""

    schools: tuple[ReferenceSchool, ...]
    layout: tuple[tuple[str, tuple[str, ...]], ...]

    @property
    def districts(self) -> list[str]:
        return [district for district, _ in self.layout]

    def __len__(self) -> int:
        return len(self.schools)

    @classmethod
    def from_mapping(cls, data: Any) -> Registry:
        """Build a registry from a `district -> county -> [names]` mapping."""
        if not isinstance(data, dict):
            raise ConfigurationError("registry must map district -> county -> [school names]")

        schools: list[ReferenceSchool] = []
        layout: list[tuple[str, tuple[str, ...]]] = []
        for district, counties in data.items():
            if not isinstance(counties, dict):
                raise ConfigurationError(f"district {district!r} must map county -> [school names]")
            for county, names in counties.items():
                if not isinstance(names, list):
                    raise ConfigurationError(f"{district!r}/{county!r} must be a list of names")
                seen: set[str] = set()
                for name in names:
                    if not isinstance(name, str) or not name.strip():
                        raise ConfigurationError(
                            f"{district!r}/{county!r} contains an invalid school name: {name!r}"
                        )
                    if name in seen:
                        raise ConfigurationError(
                            f"duplicate school {name!r} in {district!r}/{county!r}"
                        )
                    seen.add(name)
                    schools.append(ReferenceSchool(district=district, county=county, name=name))
            layout.append((district, tuple(counties)))

        return cls(schools=tuple(schools), layout=tuple(layout))


def load_registry(path: str | Path, state: str | None = None) -> Registry:
    """Load and validate the registry JSON file.

    The file is `{state: {district: {county: [names]}}}`; when `state` is None
    or absent from the file the top level is taken as the district mapping.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"registry file not found: {path}") from None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"registry file unreadable: {path}: {e}") from e

    if state is not None and isinstance(data, dict) and state in data:
        data = data[state]

    registry = Registry.from_mapping(data)
    log.info(
        "registry_loaded",
        path=str(path),
        districts=len(registry.layout),
        schools=len(registry),
    )
    return registry

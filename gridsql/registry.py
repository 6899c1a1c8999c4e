from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import json, logging, os, time, typing as t

import jsonschema
import yaml

from .catalog import ColumnCatalog
from .errors import ConfigurationMissing

log = logging.getLogger("gridsql.registry")

GRIDS_PATH = Path(os.getenv("GRIDS_FILE", "config/grids.yaml"))
GLOBAL_MAX_PAGE_SIZE = int(os.getenv("GLOBAL_MAX_PAGE_SIZE", "1000"))

GRID_CONFIG_SCHEMA: dict[str, t.Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Grid configuration",
    "type": "object",
    "required": ["grids"],
    "properties": {
        "grids": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["query", "columns"],
                "properties": {
                    "query": {"type": "string", "minLength": 1},
                    "defaultSortField": {"type": "string"},
                    "maxPageSize": {"type": "integer", "minimum": 1},
                    "columns": {
                        "type": "object",
                        "additionalProperties": {"type": "object"},
                    },
                },
            },
        },
    },
}


@dataclass(frozen=True)
class GridEntry:
    name: str
    query: str
    catalog: ColumnCatalog
    default_sort_field: t.Optional[str]
    max_page_size: int
    loaded_at: str

    @classmethod
    def from_config(cls, name: str, cfg: dict[str, t.Any]) -> "GridEntry":
        return cls(
            name=name,
            query=cfg["query"],
            catalog=ColumnCatalog.from_dict(cfg.get("columns", {})),
            default_sort_field=cfg.get("defaultSortField"),
            max_page_size=int(cfg.get("maxPageSize", GLOBAL_MAX_PAGE_SIZE)),
            loaded_at=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        )


class Registry:
    def __init__(self, path: t.Optional[Path] = None):
        self.path = Path(path) if path else GRIDS_PATH
        self.grids: dict[str, GridEntry] = {}

    def _read_config(self) -> dict[str, t.Any]:
        if not self.path.exists():
            raise ConfigurationMissing(f"Grid configuration file not found: {self.path}")
        with self.path.open("r", encoding="utf-8") as f:
            if self.path.suffix.lower() in (".yaml", ".yml"):
                cfg = yaml.safe_load(f)
            else:
                cfg = json.load(f)
        try:
            jsonschema.validate(instance=cfg, schema=GRID_CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ConfigurationMissing(f"Bad grid configuration in {self.path}: {e.message}")
        return cfg

    def load_grids(self) -> None:
        cfg = self._read_config()
        # swap the whole dict so readers never see a half-built registry
        self.grids = {name: GridEntry.from_config(name, g) for name, g in cfg["grids"].items()}
        log.info("Loaded %d grids from %s", len(self.grids), self.path)

    def ensure_grid(self, name: str) -> GridEntry:
        if not self.grids:
            self.load_grids()
        if name not in self.grids:
            raise KeyError(f"Unknown grid: {name}")
        return self.grids[name]

    def refresh_all(self) -> dict[str, str]:
        """Re-read the grids file and report what each grid now exposes."""
        cfg = self._read_config()
        fresh: dict[str, GridEntry] = {}
        summaries: dict[str, str] = {}
        for name, g in cfg["grids"].items():
            try:
                fresh[name] = GridEntry.from_config(name, g)
                summaries[name] = f"ok ({len(fresh[name].catalog)} cols)"
            except ConfigurationMissing as e:
                log.warning("Grid %s not reloaded: %s", name, e)
                summaries[name] = f"error: {e}"
        self.grids = fresh
        return summaries

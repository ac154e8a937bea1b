from __future__ import annotations

import csv
import logging
import os
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from docscan.normalize import normalize_code
from docscan.schema import CatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "reference_data" / "bscs_curriculum.csv"


class Catalog:
    """
    Canonical course table for one program, keyed by official code.

    Immutable after construction. The normalized-key index used by hydration
    is built once here so every lookup shares it.
    """

    def __init__(self, entries: Iterable[CatalogEntry], source: str = "inline"):
        by_code: dict[str, CatalogEntry] = {}
        by_key: dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.code in by_code:
                raise ValueError(f"Duplicate catalog code: {entry.code!r}")
            key = normalize_code(entry.code)
            if key in by_key:
                raise ValueError(
                    f"Catalog codes {by_key[key].code!r} and {entry.code!r} normalize to the same key"
                )
            by_code[entry.code] = entry
            by_key[key] = entry
        if not by_code:
            raise ValueError(f"Catalog {source} has no entries")
        self._entries: Mapping[str, CatalogEntry] = MappingProxyType(by_code)
        self._index: Mapping[str, CatalogEntry] = MappingProxyType(by_key)
        self.source = source
        self.reference_version = f"{source}:{len(by_code)}"

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._index

    @property
    def entries(self) -> Mapping[str, CatalogEntry]:
        return self._entries

    @property
    def codes(self) -> list[str]:
        return list(self._entries.keys())

    def get(self, code: str) -> CatalogEntry | None:
        return self._entries.get(code)

    def lookup(self, code: str | None) -> CatalogEntry | None:
        """Find the entry whose normalized code equals the normalized input."""
        return self._index.get(normalize_code(code))


def load_catalog_rows(csv_path: Path) -> list[CatalogEntry]:
    rows: list[CatalogEntry] = []
    with open(csv_path, "r", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        for item in reader:
            code = (item.get("code") or "").strip()
            if not code:
                continue
            rows.append(
                CatalogEntry(
                    code=code,
                    name=(item.get("name") or "").strip(),
                    lec_units=int(item["lec_units"]),
                    lab_units=int(item["lab_units"]),
                    units=int(item["units"]),
                    year_level=(item.get("year_level") or "").strip(),
                    semester=(item.get("semester") or "").strip(),
                )
            )
    return rows


@lru_cache(maxsize=None)
def _load_catalog(csv_path: str) -> Catalog:
    path = Path(csv_path)
    entries = load_catalog_rows(path)
    catalog = Catalog(entries, source=path.name)
    logger.info(f"Loaded curriculum catalog {catalog.reference_version}")
    return catalog


def get_catalog(csv_path: str | None = None) -> Catalog:
    """
    Return the process-wide catalog.

    Resolution order: explicit path, CURRICULUM_REFERENCE_CSV_PATH, bundled file.
    Each path is loaded once per process.
    """
    env_path = os.environ.get("CURRICULUM_REFERENCE_CSV_PATH")
    resolved = Path(csv_path or env_path or DEFAULT_CATALOG_PATH).resolve()
    return _load_catalog(str(resolved))

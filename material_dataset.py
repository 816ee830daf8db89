from __future__ import annotations

import io
import logging
import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import IO, Dict, List, Mapping, Optional, Tuple, Union

import pandas as pd

logger = logging.getLogger("matsel.dataset")

NAME_FIELD = "name"
CATEGORY_KEY = "materialtype"

# "<text> (<unit>)" with the parenthetical closing the header
_HEADER_RE = re.compile(r"^(.+)\s*\((.*?)\)\s*$")


class DatasetLoadError(Exception):
    """The material table could not be read."""


# ------------------------------------------------------------------------------
# Header parsing
# ------------------------------------------------------------------------------
def _normalize(s: str) -> str:
    return re.sub(r"\s+", "", s or "").lower()


def parse_header(header: str) -> Tuple[str, Optional[str]]:
    """Split ``"Yield Strength (MPa)"`` into ``("Yield Strength", "MPa")``.

    Headers without a trailing parenthetical come back unchanged with no unit.
    Empty parentheses count as no unit.
    """
    match = _HEADER_RE.match(header)
    if not match:
        return header, None
    unit = match.group(2)
    return match.group(1).strip(), (unit or None)


def detect_category_field(fields: List[str]) -> Optional[str]:
    return next((f for f in fields if _normalize(f) == CATEGORY_KEY), None)


# ------------------------------------------------------------------------------
# Dataset
# ------------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class MaterialDataset:
    rows: pd.DataFrame
    category_field: Optional[str] = None
    display_names: Mapping[str, str] = field(default_factory=dict)
    units: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "MaterialDataset":
        return cls(rows=pd.DataFrame(columns=[NAME_FIELD], dtype=str))

    @property
    def fields(self) -> List[str]:
        return [str(c) for c in self.rows.columns]

    @property
    def is_empty(self) -> bool:
        return self.rows.empty

    def material_names(self) -> List[str]:
        if NAME_FIELD not in self.rows.columns:
            return []
        return list(self.rows[NAME_FIELD])

    def axis_options(self) -> List[str]:
        """Candidate numeric properties: every field except the name and category columns."""
        excluded = {NAME_FIELD, self.category_field}
        return [f for f in self.fields if f not in excluded]

    def display_name(self, field_name: Optional[str]) -> str:
        if not field_name:
            return ""
        return self.display_names.get(field_name, field_name)

    def unit(self, field_name: Optional[str]) -> Optional[str]:
        if not field_name:
            return None
        return self.units.get(field_name)

    def axis_title(self, field_name: Optional[str]) -> str:
        unit = self.unit(field_name)
        title = self.display_name(field_name)
        return f"{title} ({unit})" if unit else title


def build_dataset(rows: pd.DataFrame, log: Optional[logging.Logger] = None) -> MaterialDataset:
    """Derive the category field and the header maps from an already-read table."""
    log = log or logger
    fields = [str(c) for c in rows.columns]
    log.debug("CSV headers: %s", fields)

    category_field = detect_category_field(fields)
    if category_field is None:
        log.info("No material type column found; categories disabled.")

    display_names: Dict[str, str] = {}
    units: Dict[str, str] = {}
    for header in fields:
        display, unit = parse_header(header)
        display_names[header] = display
        if unit is not None:
            units[header] = unit
            log.debug("Extracted unit for %s: %s", display, unit)
        else:
            log.debug("No unit found for header: %s", header)

    return MaterialDataset(
        rows=rows,
        category_field=category_field,
        display_names=MappingProxyType(display_names),
        units=MappingProxyType(units),
    )


def load_dataset(
    source: Union[str, "os.PathLike[str]", IO[str], IO[bytes]],
    log: Optional[logging.Logger] = None,
) -> MaterialDataset:
    """Read a comma-separated material table.

    Every cell is kept as raw text; numeric parsing happens at projection time.
    Raises DatasetLoadError when the resource is unreachable, unparseable or
    has no ``name`` column.
    """
    log = log or logger
    label = os.fspath(source) if isinstance(source, (str, os.PathLike)) else getattr(source, "name", "<stream>")
    try:
        rows = pd.read_csv(source, dtype=str, keep_default_na=False)
    except FileNotFoundError as e:
        raise DatasetLoadError(f"Material table not found: '{label}'") from e
    except (OSError, UnicodeDecodeError, pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise DatasetLoadError(f"Failed to parse '{label}': {e}") from e

    rows.columns = [str(c) for c in rows.columns]
    if NAME_FIELD not in rows.columns:
        raise DatasetLoadError(f"'{label}' has no '{NAME_FIELD}' column.")

    dataset = build_dataset(rows.reset_index(drop=True), log)
    log.info("Loaded %d materials from %s", len(dataset.rows), label)
    return dataset


def export_csv(rows: Optional[pd.DataFrame]) -> Optional[bytes]:
    """Serialize rows back to CSV bytes for download; None when there is nothing to export."""
    if rows is None or rows.empty:
        return None
    buf = io.StringIO()
    rows.to_csv(buf, index=False)
    return buf.getvalue().encode("utf-8")

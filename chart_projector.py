"""Selection state and the pure projections behind the scatter chart.

Nothing here is cached: the chart series and the legend are recomputed from
the dataset and the current selection every time they are asked for.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional

import pandas as pd

from category_colors import color_for
from material_dataset import NAME_FIELD, MaterialDataset

logger = logging.getLogger("matsel.projector")

SCI_LOWER = 0.01
SCI_UPPER = 1_000_000
SCI_DIGITS = 2


class Axis(Enum):
    X = "x"
    Y = "y"


# ------------------------------------------------------------------------------
# Selection state
# ------------------------------------------------------------------------------
@dataclass
class SelectionState:
    materials: List[str] = field(default_factory=list)
    x_axis: Optional[str] = None
    y_axis: Optional[str] = None

    def select_materials(self, names: Iterable[str]) -> None:
        """Replace the selection; duplicates collapse, first occurrence wins."""
        self.materials = list(dict.fromkeys(names))

    def set_axis(self, which: Axis, field_name: Optional[str]) -> None:
        if which is Axis.X:
            self.x_axis = field_name or None
        else:
            self.y_axis = field_name or None

    def axis(self, which: Axis) -> Optional[str]:
        return self.x_axis if which is Axis.X else self.y_axis

    def reset(self) -> None:
        self.materials = []
        self.x_axis = None
        self.y_axis = None

    @property
    def is_complete(self) -> bool:
        return bool(self.materials and self.x_axis and self.y_axis)


@dataclass(frozen=True)
class ChartSeries:
    label: str
    x: float
    y: float
    color: str
    category: Optional[str] = None

    @property
    def point(self) -> tuple:
        return (self.x, self.y)

    @property
    def plottable(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


# ------------------------------------------------------------------------------
# Projection
# ------------------------------------------------------------------------------
def selected_rows(dataset: MaterialDataset, selection: SelectionState) -> pd.DataFrame:
    rows = dataset.rows
    if rows.empty or not selection.materials or NAME_FIELD not in rows.columns:
        return rows.iloc[0:0]
    return rows[rows[NAME_FIELD].isin(selection.materials)]


def _numeric(rows: pd.DataFrame, field_name: Optional[str]) -> pd.Series:
    """Floats for one column; unset axes, missing columns and non-numeric text give NaN."""
    if not field_name or field_name not in rows.columns:
        return pd.Series(math.nan, index=rows.index, dtype=float)
    return pd.to_numeric(rows[field_name].astype(str).str.strip(), errors="coerce").astype(float)


def project(
    dataset: MaterialDataset,
    selection: SelectionState,
    colors: Mapping[str, str],
) -> List[ChartSeries]:
    """One series per selected material found in the dataset, in dataset order.

    Names that are not in the dataset are skipped. A non-numeric or missing
    axis value keeps its series with a NaN coordinate; see ChartSeries.plottable.
    """
    rows = selected_rows(dataset, selection)
    xs = _numeric(rows, selection.x_axis)
    ys = _numeric(rows, selection.y_axis)
    cat_field = dataset.category_field
    categories = rows[cat_field] if cat_field in rows.columns else [None] * len(rows)

    series: List[ChartSeries] = []
    for name, category, x, y in zip(rows[NAME_FIELD], categories, xs, ys):
        s = ChartSeries(
            label=name,
            x=float(x),
            y=float(y),
            color=color_for(category, colors),
            category=category or None,
        )
        if not s.plottable:
            logger.debug("Non-numeric value for %s on %s/%s", s.label, selection.x_axis, selection.y_axis)
        series.append(s)
    return series


def active_categories(
    dataset: MaterialDataset,
    selection: SelectionState,
    colors: Mapping[str, str],
) -> Dict[str, str]:
    """Legend entries: the color map restricted to categories of the selected rows."""
    cat_field = dataset.category_field
    if not cat_field:
        return {}
    present = set(selected_rows(dataset, selection)[cat_field])
    return {cat: color for cat, color in colors.items() if cat in present}


# ------------------------------------------------------------------------------
# Number formatting for ticks and tooltips
# ------------------------------------------------------------------------------
def _to_exponential(value: float, digits: int = SCI_DIGITS) -> str:
    d = abs(Decimal(value))
    sign = "-" if value < 0 else ""
    exp = d.adjusted()
    quantum = Decimal(1).scaleb(-digits)
    mantissa = d.scaleb(-exp).quantize(quantum, rounding=ROUND_HALF_UP)
    if mantissa >= 10:
        mantissa = (mantissa / 10).quantize(quantum, rounding=ROUND_HALF_UP)
        exp += 1
    return f"{sign}{mantissa}e{'+' if exp >= 0 else '-'}{abs(exp)}"


def format_value(value: float) -> str:
    """Render an axis tick or tooltip number.

    Magnitudes below 0.01 or at/above one million use exponential notation with
    two mantissa decimals (``4.20e-3``, ``1.25e+6``); anything else is rounded
    half away from zero to an integer. Zero takes the integer branch.
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"
    magnitude = abs(value)
    if magnitude < SCI_LOWER or magnitude >= SCI_UPPER:
        return _to_exponential(value)
    return str(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def tooltip_lines(series: ChartSeries, dataset: MaterialDataset, selection: SelectionState) -> List[str]:
    lines = []
    for which, value in ((Axis.X, series.x), (Axis.Y, series.y)):
        field_name = selection.axis(which)
        unit = dataset.unit(field_name)
        text = f"{dataset.display_name(field_name)}: {format_value(value)}"
        lines.append(f"{text} {unit}" if unit else text)
    return lines

import os

import pandas as pd
import pytest

from category_colors import (
    NEUTRAL_COLOR,
    assign_category_colors,
    color_for,
    distinct_categories,
    hsl,
    hue_of,
)
from material_dataset import load_dataset

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
TEMPLATES = os.path.join(REPO_ROOT, "templates")


def _rows(categories):
    return pd.DataFrame({"name": [f"m{i}" for i in range(len(categories))], "Material Type": categories})


def test_two_categories_are_opposite_hues():
    ds = load_dataset(os.path.join(TEMPLATES, "sample_materials.csv"))
    colors = assign_category_colors(ds.rows, ds.category_field)
    assert colors == {"Metal": "hsl(0, 70%, 50%)", "Plastic": "hsl(180, 70%, 50%)"}


def test_empty_categories_take_no_slot():
    ds = load_dataset(os.path.join(TEMPLATES, "sample_mixed_categories.csv"))
    colors = assign_category_colors(ds.rows, ds.category_field)
    assert list(colors) == ["Metal", "Plastic", "Ceramic"]
    assert [hue_of(c) for c in colors.values()] == [0, 120, 240]
    assert "" not in colors


def test_no_category_field_gives_empty_map():
    ds = load_dataset(os.path.join(TEMPLATES, "sample_no_category.csv"))
    assert assign_category_colors(ds.rows, ds.category_field) == {}
    assert assign_category_colors(ds.rows, "Material Type") == {}


@pytest.mark.parametrize("count", [1, 2, 3, 5, 7, 12])
def test_hues_evenly_spaced(count):
    categories = [f"type{i}" for i in range(count)]
    # repeats and blanks must not change the spacing
    colors = assign_category_colors(_rows(categories + ["", categories[0]]), "Material Type")
    assert len(colors) == len(set(colors.values())) == count
    hues = [hue_of(c) for c in colors.values()]
    assert hues[0] == 0
    for a, b in zip(hues, hues[1:]):
        assert b - a == pytest.approx(360 / count)


def test_order_of_first_appearance():
    rows = _rows(["Plastic", "Metal", "Plastic", "Wood"])
    assert distinct_categories(rows, "Material Type") == ["Plastic", "Metal", "Wood"]
    assert hue_of(assign_category_colors(rows, "Material Type")["Plastic"]) == 0


def test_stable_across_repeated_loads():
    path = os.path.join(REPO_ROOT, "data", "matDb.csv")
    first = load_dataset(path)
    second = load_dataset(path)
    assert assign_category_colors(first.rows, first.category_field) == assign_category_colors(
        second.rows, second.category_field
    )


def test_fractional_hue_round_trips():
    color = hsl(360 / 7)
    assert color.startswith("hsl(51.42857142857")
    assert hue_of(color) == pytest.approx(360 / 7)


def test_color_for_falls_back_to_neutral():
    colors = {"Metal": hsl(0)}
    assert color_for("Metal", colors) == "hsl(0, 70%, 50%)"
    assert color_for("Wood", colors) == NEUTRAL_COLOR
    assert color_for("", colors) == NEUTRAL_COLOR
    assert color_for(None, colors) == NEUTRAL_COLOR
    assert hue_of(NEUTRAL_COLOR) is None

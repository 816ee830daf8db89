# app.py
# ==============================================================================
# Mechanical Design Toolbox: Material Selection Tool
# - Bundled material table: display names + units parsed from the headers
# - One hue per material type, evenly spread around the color wheel
# - Pick materials and two properties, compare them on a scatter plot
# ==============================================================================

from __future__ import annotations

import html
import logging
import os

import streamlit as st

import config
from category_colors import assign_category_colors, hue_of
from chart_projector import Axis, SelectionState, active_categories, project, selected_rows
from logging_config import setup_logging
from material_dataset import DatasetLoadError, MaterialDataset, export_csv, load_dataset
from plotting import build_scatter_figure


# ------------------------------------------------------------------------------
# Streamlit page config
# ------------------------------------------------------------------------------
st.set_page_config(page_title="Mechanical Design Toolbox", layout="wide")

AXIS_KEYS = {Axis.X: "x_axis", Axis.Y: "y_axis"}
PROMPT = "Please select materials, X-axis, and Y-axis to display the plot."


@st.cache_resource
def get_logger() -> logging.Logger:
    return setup_logging(config.LOG_LEVEL, config.LOG_FILE)


logger = get_logger()


# ------------------------------------------------------------------------------
# Session state: dataset is loaded once per session, failures leave it empty
# ------------------------------------------------------------------------------
def _load_session_dataset() -> MaterialDataset:
    st.session_state.load_error = None
    try:
        return load_dataset(config.DATA_PATH, logger.getChild("dataset"))
    except DatasetLoadError as e:
        logger.exception("Error loading material table")
        st.session_state.load_error = str(e)
        return MaterialDataset.empty()


if "dataset" not in st.session_state:
    st.session_state.dataset = _load_session_dataset()
    st.session_state.category_colors = assign_category_colors(
        st.session_state.dataset.rows, st.session_state.dataset.category_field
    )
    st.session_state.selection = SelectionState()

dataset: MaterialDataset = st.session_state.dataset
colors = st.session_state.category_colors
selection: SelectionState = st.session_state.selection


# ------------------------------------------------------------------------------
# Widget callbacks
# ------------------------------------------------------------------------------
def on_materials_change() -> None:
    selection.select_materials(st.session_state.materials)


def on_axis_change(which: Axis) -> None:
    selection.set_axis(which, st.session_state[AXIS_KEYS[which]])


def on_reset() -> None:
    selection.reset()
    st.session_state.materials = []
    for key in AXIS_KEYS.values():
        st.session_state[key] = None


def _read_md(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return f"**Missing file:** `{path}`. Add the docs folder to the repository."
    except OSError as e:
        return f"**Error reading `{path}`:** {e}"


def _legend_entry(category: str, color: str) -> str:
    swatch = (
        f'<span style="background-color:{color};width:20px;height:20px;display:inline-block;'
        'margin-right:5px;border:1px solid black;vertical-align:middle"></span>'
    )
    return f'<div style="margin-bottom:5px">{swatch}<span style="vertical-align:middle">{html.escape(category)}</span></div>'


# ------------------------------------------------------------------------------
# App title & description
# ------------------------------------------------------------------------------
st.title("Mechanical Design Toolbox")
st.header("Material Selection Tool")
st.markdown("Visualize material properties using this chart.")
st.sidebar.caption(f"Version {config.app_version()}")

if st.session_state.load_error:
    st.error(f"Error loading material data: {st.session_state.load_error}")

# ------------------------------------------------------------------------------
# Controls
# ------------------------------------------------------------------------------
st.multiselect(
    "Materials",
    options=list(dict.fromkeys(dataset.material_names())),
    key="materials",
    on_change=on_materials_change,
    placeholder="Choose materials",
)

axis_options = dataset.axis_options()
col_x, col_y, col_reset = st.columns([2, 2, 1], vertical_alignment="bottom")
with col_x:
    st.selectbox(
        "X-axis",
        options=axis_options,
        index=None,
        placeholder="Select X-axis",
        format_func=dataset.display_name,
        key=AXIS_KEYS[Axis.X],
        on_change=on_axis_change,
        args=(Axis.X,),
    )
with col_y:
    st.selectbox(
        "Y-axis",
        options=axis_options,
        index=None,
        placeholder="Select Y-axis",
        format_func=dataset.display_name,
        key=AXIS_KEYS[Axis.Y],
        on_change=on_axis_change,
        args=(Axis.Y,),
    )
with col_reset:
    st.button("Reset", key="reset", on_click=on_reset)

# ------------------------------------------------------------------------------
# Plot + material type legend
# ------------------------------------------------------------------------------
col_plot, col_legend = st.columns([4, 1])

with col_plot:
    if selection.is_complete:
        series = project(dataset, selection, colors)
        st.plotly_chart(build_scatter_figure(series, dataset, selection), use_container_width=True)
        # Non-numeric points are kept by project() but cannot be drawn
        skipped = [s.label for s in series if not s.plottable]
        if skipped:
            st.warning(
                "Not plotted (missing or non-numeric value on a chosen axis): " + ", ".join(skipped)
            )
    else:
        st.info(PROMPT)

with col_legend:
    st.markdown("#### Material Types")
    legend = active_categories(dataset, selection, colors)
    if legend:
        st.markdown("".join(_legend_entry(c, col) for c, col in legend.items()), unsafe_allow_html=True)
    else:
        st.caption("No material types selected.")

# ------------------------------------------------------------------------------
# Selected rows: preview & export
# ------------------------------------------------------------------------------
chosen = selected_rows(dataset, selection)
with st.expander("Preview selected materials"):
    st.dataframe(chosen, use_container_width=True, hide_index=True)

csv_bytes = export_csv(chosen)
if csv_bytes:
    st.download_button(
        label="📥 Download Selected Materials",
        data=csv_bytes,
        file_name="Selected_Materials.csv",
        mime="text/csv",
    )

# ------------------------------------------------------------------------------
# Dataset diagnostics (for transparency/debugging)
# ------------------------------------------------------------------------------
with st.expander("Dataset diagnostics"):
    x_field, y_field = selection.axis(Axis.X), selection.axis(Axis.Y)
    type_list = ", ".join(f"{c} (hue {hue_of(col):g})" for c, col in colors.items())
    st.markdown(
        f"- Number of materials: {len(dataset.rows)}\n"
        f"- Material type column: {dataset.category_field or 'not found'}\n"
        f"- Material types: {type_list or 'none'}\n"
        f"- Selected materials: {', '.join(selection.materials) or 'none'}\n"
        f"- X-axis: {x_field or 'not set'} (unit: {dataset.unit(x_field) or 'Not found'})\n"
        f"- Y-axis: {y_field or 'not set'} (unit: {dataset.unit(y_field) or 'Not found'})"
    )
    st.json({
        "color_map": colors,
        "units": dict(dataset.units),
        "display_names": dict(dataset.display_names),
    })

# ------------------------------------------------------------------------------
# Documentation
# ------------------------------------------------------------------------------
st.divider()
st.subheader("Documentation")

tab_usage, tab_conventions = st.tabs(["Usage Guide", "Data Conventions"])

with tab_usage:
    st.markdown(_read_md(os.path.join(config.DOCS_PATH, "usage.md")))

with tab_conventions:
    st.markdown(_read_md(os.path.join(config.DOCS_PATH, "data-conventions.md")))

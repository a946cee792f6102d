# SPDX-License-Identifier: GPL-3.0-or-later

# Copyright (C) 2026 Darkmine Pty Ltd

# This file is part of boresection.

# boresection is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# boresection is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with boresection.  If not, see <https://www.gnu.org/licenses/>.

"""Layout of canonical boreholes as a multi-column, elevation-referenced section.

The layout engine turns reconciled boreholes into plain geometry a renderer can
draw without knowing anything about soils: a canvas size, one shared vertical
scale, grid lines, and per borehole a column with its strips, one rectangle per
layer and one point per SPT record.

Every vertical coordinate goes through :meth:`VerticalScale.pixel_y`, so grid
lines, layer boundaries, SPT points and water-table markers at the same
elevation land on the same pixel row in every column.

Two elevation modes are used:

- absolute: each column hangs from its parsed header elevation, so boreholes
  sit at their true relative heights;
- relative: every surface is drawn at 0 and grid labels read as depth below
  surface. Chosen for a single borehole, or when the elevation spread exceeds
  ``LayoutConfig.relative_mode_threshold`` (usually a misread elevation that
  would otherwise squash every other column).

The canvas grows linearly with the number of boreholes and is never wrapped or
paginated.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd
import shapely.geometry

from boresection.datamodel import WATER_TABLE_PLACEHOLDER
from boresection.extent import CanvasExtent
from .model import HeaderData, LayoutConfig

logger = logging.getLogger(__name__)

_ELEVATION_JUNK_RE = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER_RE = re.compile(r"^-?(?:\d+(?:\.\d*)?|\.\d+)")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self):
        return self.x + self.width

    @property
    def bottom(self):
        return self.y + self.height

    @property
    def box(self):
        return shapely.geometry.box(self.x, self.y, self.right, self.bottom)


@dataclass(frozen=True)
class VerticalScale:
    pixels_per_unit: float
    relative_mode: bool
    top_elevation: int
    bottom_elevation: int
    margin_top: float

    @property
    def elevation_range(self):
        return self.top_elevation - self.bottom_elevation

    @property
    def chart_height(self):
        return self.elevation_range * self.pixels_per_unit

    def pixel_y(self, elevation):
        return self.margin_top + (self.top_elevation - elevation) * self.pixels_per_unit

    def depth_y(self, surface_elevation, depth):
        return self.pixel_y(surface_elevation - depth)


@dataclass(frozen=True)
class GridLine:
    elevation: int
    y: float
    label: str
    x_start: float
    x_end: float


@dataclass(frozen=True)
class LayerGeometry:
    layer_id: str
    depth_from: float
    depth_to: float
    uscs: str
    description: str
    color: str
    pattern: str
    litho: Rect
    params: Rect
    description_box: Rect
    label_x: float
    label_y: float
    # Fines, plasticity and swelling, "-" where unknown
    params_text: Tuple[str, str, str]
    depth_label: str
    depth_label_x: float
    depth_label_y: float


@dataclass(frozen=True)
class SPTPoint:
    record_id: str
    depth: float
    value: float
    plotted_value: float
    x: float
    y: float


@dataclass(frozen=True)
class ColumnLayout:
    borehole_id: str
    borehole_name: str
    header: HeaderData
    x: float
    width: float
    surface_elevation: float
    plot_depth: float
    header_box: Rect
    frame: Rect
    depth_strip: Rect
    litho_strip: Rect
    params_strip: Rect
    description_strip: Rect
    spt_strip: Rect
    layers: Tuple[LayerGeometry, ...]
    spt_points: Tuple[SPTPoint, ...]
    spt_polyline: Tuple[Tuple[float, float], ...]
    water_table_depth: Optional[float] = None
    water_table_y: Optional[float] = None


@dataclass(frozen=True)
class LayoutModel:
    width: float
    height: float
    scale: VerticalScale
    grid_lines: Tuple[GridLine, ...]
    columns: Tuple[ColumnLayout, ...]
    title_block: Rect
    project_name: str = ""

    @property
    def relative_mode(self):
        return self.scale.relative_mode

    @property
    def extent(self):
        return CanvasExtent(xmin=0, xmax=self.width, ymin=0, ymax=self.height, name=self.project_name or None)


def parse_elevation(text):
    """Numeric elevation from header text; 0 when nothing numeric can be read.

    Everything except digits, ``.`` and ``-`` is discarded first, so
    ``"+12.5 m"`` reads as 12.5. The longest leading number is then taken.
    """
    cleaned = _ELEVATION_JUNK_RE.sub("", "" if text is None else str(text))
    match = _LEADING_NUMBER_RE.match(cleaned)
    if not match:
        return 0.0
    return float(match.group())


def parse_water_table_depth(text):
    """First number in a water-table note, as a depth; None when no water was recorded."""
    text = "" if text is None else str(text).strip()
    if not text or text == WATER_TABLE_PLACEHOLDER:
        return None
    match = _NUMBER_RE.search(text)
    if not match:
        return None
    return abs(float(match.group()))


def resolve_surfaces(boreholes, config=None):
    """Pick the elevation mode and the plotting-surface elevation of each borehole.

    Returns ``(relative_mode, surfaces)`` with one surface per borehole, in order.
    """
    config = config or LayoutConfig()
    elevations = [parse_elevation(borehole.header.elevation) for borehole in boreholes]
    spread = max(elevations) - min(elevations)
    relative_mode = len(elevations) < 2 or spread > config.relative_mode_threshold
    if relative_mode:
        return True, [0.0] * len(elevations)
    return False, elevations


def plot_depth(borehole, config=None):
    """Depth a borehole's column is drawn down to, never less than ``min_plot_depth``."""
    config = config or LayoutConfig()
    return max(borehole.max_depth, config.min_plot_depth)


def vertical_scale(surfaces, depths, relative_mode, config=None):
    config = config or LayoutConfig()
    top = math.ceil(max(surfaces)) + config.elevation_margin
    bottom = min(math.floor(surface - depth) for surface, depth in zip(surfaces, depths)) - config.elevation_margin
    return VerticalScale(
        pixels_per_unit=config.pixels_per_unit,
        relative_mode=relative_mode,
        top_elevation=int(top),
        bottom_elevation=int(bottom),
        margin_top=config.margin_top,
    )


def canvas_width(count, config=None):
    config = config or LayoutConfig()
    return (
        2 * config.margin_sides
        + count * config.column_width
        + (count - 1) * config.column_gap
        + config.canvas_padding
    )


def grid_lines(scale, width, config=None):
    """One line per elevation unit from the top of the chart to the bottom.

    In relative mode labels are elevations relative to the common surface:
    ``"0m"`` at the surface, negative below it. The top margin row sits above
    the surface and is labelled with its positive offset, ``"1m"`` by default.
    """
    config = config or LayoutConfig()
    lines = []
    for elevation in np.arange(scale.top_elevation, scale.bottom_elevation - 1, -1):
        elevation = int(elevation)
        label = f"{elevation}m" if scale.relative_mode else str(elevation)
        lines.append(GridLine(
            elevation=elevation,
            y=scale.pixel_y(elevation),
            label=label,
            x_start=config.margin_sides,
            x_end=width - config.margin_sides,
        ))
    return tuple(lines)


def spt_offsets(values, strip_width, clamp=50):
    """Horizontal offsets inside the SPT strip; blow counts above ``clamp`` plot at the edge."""
    values = np.asarray(values, dtype=float)
    return np.minimum(values, clamp) / clamp * strip_width


def _format_depth(value):
    return f"{value:g}"


def _layer_geometry(layer, surface, scale, litho_x, params_x, desc_x, depth_label_x, config):
    y_from = scale.depth_y(surface, layer.depth_from)
    y_to = scale.depth_y(surface, layer.depth_to)
    top = min(y_from, y_to)
    height = abs(y_to - y_from)
    return LayerGeometry(
        layer_id=layer.id,
        depth_from=layer.depth_from,
        depth_to=layer.depth_to,
        uscs=layer.uscs,
        description=layer.description,
        color=layer.color,
        pattern=layer.pattern,
        litho=Rect(litho_x, top, config.litho_strip_width, height),
        params=Rect(params_x, top, config.params_strip_width, height),
        description_box=Rect(desc_x, top, config.description_strip_width, height),
        label_x=litho_x + config.litho_strip_width / 2,
        label_y=top + min(height / 2, config.label_clamp),
        params_text=(layer.fine_percent or "-", layer.plasticity or "-", layer.swelling or "-"),
        depth_label=_format_depth(layer.depth_to),
        depth_label_x=depth_label_x,
        depth_label_y=y_to,
    )


def layout_column(borehole, index, surface, depth, scale, config=None):
    """Geometry of one borehole column at position ``index`` from the left."""
    config = config or LayoutConfig()
    x = config.margin_sides + config.column_offset + index * (config.column_width + config.column_gap)
    top = config.margin_top
    height = scale.chart_height

    litho_x = x + config.depth_strip_width
    params_x = litho_x + config.litho_strip_width
    desc_x = params_x + config.params_strip_width
    spt_x = x + config.column_width - config.spt_strip_width

    layers = tuple(
        _layer_geometry(layer, surface, scale, litho_x, params_x, desc_x, x + config.depth_strip_width / 2, config)
        for layer in borehole.layers
    )

    records = sorted(borehole.spt, key=lambda record: record.depth)
    points = []
    if records:
        offsets = spt_offsets([record.value for record in records], config.spt_strip_width, config.spt_clamp)
        for record, offset in zip(records, offsets):
            points.append(SPTPoint(
                record_id=record.id,
                depth=record.depth,
                value=record.value,
                plotted_value=min(record.value, config.spt_clamp),
                x=spt_x + float(offset),
                y=scale.depth_y(surface, record.depth),
            ))

    water_depth = parse_water_table_depth(borehole.header.water_table)
    return ColumnLayout(
        borehole_id=borehole.internal_id,
        borehole_name=borehole.name,
        header=borehole.header,
        x=x,
        width=config.column_width,
        surface_elevation=surface,
        plot_depth=depth,
        header_box=Rect(x, top - config.header_offset, config.column_width, config.header_height),
        frame=Rect(x, top, config.column_width, height),
        depth_strip=Rect(x, top, config.depth_strip_width, height),
        litho_strip=Rect(litho_x, top, config.litho_strip_width, height),
        params_strip=Rect(params_x, top, config.params_strip_width, height),
        description_strip=Rect(desc_x, top, config.description_strip_width, height),
        spt_strip=Rect(spt_x, top, config.spt_strip_width, height),
        layers=layers,
        spt_points=tuple(points),
        spt_polyline=tuple((point.x, point.y) for point in points),
        water_table_depth=water_depth,
        water_table_y=None if water_depth is None else scale.depth_y(surface, water_depth),
    )


def build_layout(boreholes, config=None):
    """Lay out canonical boreholes, left to right in the order given.

    Raises ``ValueError`` for an empty collection: there is no elevation range
    to scale against, and an empty canvas would hide the upstream failure.
    """
    boreholes = list(boreholes or [])
    if not boreholes:
        raise ValueError("build_layout requires at least one borehole")
    config = config or LayoutConfig()

    relative_mode, surfaces = resolve_surfaces(boreholes, config)
    depths = [plot_depth(borehole, config) for borehole in boreholes]
    scale = vertical_scale(surfaces, depths, relative_mode, config)

    width = canvas_width(len(boreholes), config)
    height = scale.chart_height + config.margin_top + config.margin_bottom
    columns = tuple(
        layout_column(borehole, idx, surface, depth, scale, config)
        for idx, (borehole, surface, depth) in enumerate(zip(boreholes, surfaces, depths))
    )
    title_block = Rect(
        width - config.title_block_inset_x,
        height - config.title_block_inset_y,
        config.title_block_width,
        config.title_block_height,
    )

    logger.info(
        "Laid out %d boreholes in %s mode, elevations %d to %d, canvas %gx%g px",
        len(boreholes),
        "relative" if relative_mode else "absolute",
        scale.bottom_elevation,
        scale.top_elevation,
        width,
        height,
    )
    return LayoutModel(
        width=width,
        height=height,
        scale=scale,
        grid_lines=grid_lines(scale, width, config),
        columns=columns,
        title_block=title_block,
        project_name=boreholes[0].header.project_name,
    )


def layer_frame(layout):
    """One row per layer rectangle, for renderers that work from tables."""
    rows = []
    for column in layout.columns:
        for layer in column.layers:
            rows.append({
                "borehole_name": column.borehole_name,
                "layer_id": layer.layer_id,
                "depth_from": layer.depth_from,
                "depth_to": layer.depth_to,
                "uscs": layer.uscs,
                "color": layer.color,
                "pattern": layer.pattern,
                "x": layer.litho.x,
                "y": layer.litho.y,
                "width": layer.litho.width,
                "height": layer.litho.height,
            })
    columns = ["borehole_name", "layer_id", "depth_from", "depth_to", "uscs", "color", "pattern", "x", "y", "width", "height"]
    return pd.DataFrame(rows, columns=columns)


def spt_frame(layout):
    rows = []
    for column in layout.columns:
        for point in column.spt_points:
            rows.append({
                "borehole_name": column.borehole_name,
                "record_id": point.record_id,
                "depth": point.depth,
                "value": point.value,
                "x": point.x,
                "y": point.y,
            })
    return pd.DataFrame(rows, columns=["borehole_name", "record_id", "depth", "value", "x", "y"])


def grid_frame(layout):
    return pd.DataFrame(
        [{"elevation": line.elevation, "y": line.y, "label": line.label} for line in layout.grid_lines],
        columns=["elevation", "y", "label"],
    )

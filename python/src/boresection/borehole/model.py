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

"""Record types for borehole log fragments and canonical boreholes.

Fragments mirror what the extraction service returns for one input unit: every
field is optional, and ``None`` (absent) is kept apart from ``""`` (present but
empty). Canonical records are frozen once reconciliation has produced them and
are read by the layout engine without modification.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

from boresection.datamodel import ELEVATION_PLACEHOLDER, WATER_TABLE_PLACEHOLDER


@dataclass
class HeaderFragment:
    borehole_name: Optional[str] = None
    project_name: Optional[str] = None
    date: Optional[str] = None
    elevation: Optional[str] = None
    coordinates: Optional[str] = None
    client: Optional[str] = None
    water_table: Optional[str] = None


@dataclass
class LayerFragment:
    depth_from: Optional[float] = None
    depth_to: Optional[float] = None
    description: Optional[str] = None
    uscs: Optional[str] = None
    fine_percent: Optional[str] = None
    plasticity: Optional[str] = None
    swelling: Optional[str] = None
    color_text: Optional[str] = None


@dataclass
class SPTFragment:
    depth: Optional[float] = None
    value: Optional[float] = None
    notes: Optional[str] = None


@dataclass
class RawFragment:
    """One borehole as seen on one input unit (page, image, sheet)."""

    header: HeaderFragment = field(default_factory=HeaderFragment)
    layers: list = field(default_factory=list)
    spt: list = field(default_factory=list)
    # Label of the input unit the fragment was extracted from, if known
    source: Optional[str] = None
    fragment_id: Optional[str] = None


@dataclass(frozen=True)
class HeaderData:
    borehole_name: str = ""
    project_name: str = ""
    date: str = ""
    elevation: str = ELEVATION_PLACEHOLDER
    coordinates: str = ""
    client: str = ""
    water_table: str = WATER_TABLE_PLACEHOLDER


@dataclass(frozen=True)
class SoilLayer:
    id: str
    depth_from: float
    depth_to: float
    description: str = ""
    uscs: str = ""
    fine_percent: Optional[str] = None
    plasticity: Optional[str] = None
    swelling: Optional[str] = None
    color_text: Optional[str] = None
    # Derived from the USCS code
    color: str = "#FFFFFF"
    pattern: str = "none"

    @property
    def thickness(self):
        return self.depth_to - self.depth_from


@dataclass(frozen=True)
class SPTRecord:
    id: str
    depth: float
    value: float
    notes: str = ""


@dataclass(frozen=True)
class CanonicalBorehole:
    internal_id: str
    header: HeaderData
    layers: Tuple[SoilLayer, ...] = ()
    spt: Tuple[SPTRecord, ...] = ()

    @property
    def name(self):
        return self.header.borehole_name

    @property
    def max_depth(self):
        """Deepest depth reached by any layer or SPT record, 0 when both are empty."""
        depths = [layer.depth_to for layer in self.layers] + [record.depth for record in self.spt]
        return max(depths, default=0.0)


class LayoutConfig:
    """Dimensions and thresholds used by the layout engine.

    Lengths are in pixels unless named otherwise; depths and elevations are in
    the log's own unit (metres for most logs).
    """

    def __init__(self,
        column_width=420,
        column_gap=50,
        margin_top=100,
        margin_bottom=220,
        margin_sides=80,
        column_offset=50,
        canvas_padding=100,
        pixels_per_unit=70,
        relative_mode_threshold=50,
        min_plot_depth=10,
        elevation_margin=1,
        spt_clamp=50,
        depth_strip_width=30,
        litho_strip_width=50,
        params_strip_width=100,
        description_strip_width=140,
        spt_strip_width=100,
        label_clamp=15,
        header_height=60,
        header_offset=80,
        title_block_width=400,
        title_block_height=150,
        title_block_inset_x=450,
        title_block_inset_y=180):
        self.column_width = column_width
        self.column_gap = column_gap
        self.margin_top = margin_top
        self.margin_bottom = margin_bottom
        self.margin_sides = margin_sides
        self.column_offset = column_offset
        self.canvas_padding = canvas_padding
        self.pixels_per_unit = pixels_per_unit
        self.relative_mode_threshold = relative_mode_threshold
        self.min_plot_depth = min_plot_depth
        self.elevation_margin = elevation_margin
        self.spt_clamp = spt_clamp
        self.depth_strip_width = depth_strip_width
        self.litho_strip_width = litho_strip_width
        self.params_strip_width = params_strip_width
        self.description_strip_width = description_strip_width
        self.spt_strip_width = spt_strip_width
        self.label_clamp = label_clamp
        self.header_height = header_height
        self.header_offset = header_offset
        self.title_block_width = title_block_width
        self.title_block_height = title_block_height
        self.title_block_inset_x = title_block_inset_x
        self.title_block_inset_y = title_block_inset_y

    def update(self, **kwargs):
        for key, val in kwargs.items():
            if not hasattr(self, key):
                raise ValueError(f"Unknown layout setting: {key}")
            setattr(self, key, val)
        return self

    def to_dict(self):
        return dict(vars(self))

    def copy(self):
        return LayoutConfig(**self.to_dict())

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

import pytest

from boresection.borehole import layout
from boresection.borehole.model import CanonicalBorehole, HeaderData, LayoutConfig, SoilLayer, SPTRecord


def _borehole(name, elevation="0.00", layers=(), spt=(), water_table="-"):
    return CanonicalBorehole(
        internal_id=f"id-{name}",
        header=HeaderData(borehole_name=name, elevation=elevation, water_table=water_table, project_name="Harbour"),
        layers=tuple(
            SoilLayer(id=f"{name}-layer-{i}", depth_from=f, depth_to=t, uscs="CL")
            for i, (f, t) in enumerate(layers)
        ),
        spt=tuple(SPTRecord(id=f"{name}-spt-{i}", depth=d, value=v) for i, (d, v) in enumerate(spt)),
    )


def test_parse_elevation_variants():
    assert layout.parse_elevation("+12.5 m") == 12.5
    assert layout.parse_elevation("-3.2") == -3.2
    assert layout.parse_elevation("12.5.3") == 12.5
    assert layout.parse_elevation("abc") == 0.0
    assert layout.parse_elevation("") == 0.0
    assert layout.parse_elevation(None) == 0.0


def test_small_spread_selects_absolute_mode():
    boreholes = [_borehole("1", "10"), _borehole("2", "8")]
    relative, surfaces = layout.resolve_surfaces(boreholes)
    assert relative is False
    assert surfaces == [10.0, 8.0]

    model = layout.build_layout(boreholes)
    assert model.relative_mode is False
    assert [c.surface_elevation for c in model.columns] == [10.0, 8.0]


def test_large_spread_selects_relative_mode():
    boreholes = [_borehole("1", "10"), _borehole("2", "80")]
    relative, surfaces = layout.resolve_surfaces(boreholes)
    assert relative is True
    assert surfaces == [0.0, 0.0]
    model = layout.build_layout(boreholes)
    assert [c.surface_elevation for c in model.columns] == [0.0, 0.0]


def test_single_borehole_uses_relative_mode():
    model = layout.build_layout([_borehole("1", "35.0")])
    assert model.relative_mode is True
    assert model.scale.top_elevation == 1
    assert model.scale.bottom_elevation == -11
    labels = [line.label for line in model.grid_lines]
    assert labels[:3] == ["1m", "0m", "-1m"]
    assert labels[-1] == "-11m"
    assert len(model.grid_lines) == 13


def test_threshold_is_configurable():
    boreholes = [_borehole("1", "10"), _borehole("2", "80")]
    relative, _ = layout.resolve_surfaces(boreholes, LayoutConfig(relative_mode_threshold=100))
    assert relative is False


def test_plot_depth_has_a_floor():
    assert layout.plot_depth(_borehole("1", layers=[(0, 3)])) == 10
    assert layout.plot_depth(_borehole("1", layers=[(0, 3)], spt=[(14.5, 30)])) == 14.5
    assert layout.plot_depth(_borehole("1", layers=[(0, 22)])) == 22


def test_vertical_extent_and_canvas_size():
    boreholes = [
        _borehole("1", "10", layers=[(0, 5)]),
        _borehole("2", "8", layers=[(0, 15)]),
    ]
    model = layout.build_layout(boreholes)
    assert model.scale.top_elevation == 11
    assert model.scale.bottom_elevation == -8
    assert model.height == 19 * 70 + 100 + 220
    assert model.width == 2 * 80 + 2 * 420 + 50 + 100
    assert [line.label for line in model.grid_lines][:2] == ["11", "10"]


def test_canvas_width_grows_linearly():
    one, two, ten = (layout.canvas_width(n) for n in (1, 2, 10))
    assert one == 2 * 80 + 420 + 100
    assert two - one == 420 + 50
    assert ten == one + 9 * (420 + 50)


def test_column_placement_and_strips():
    model = layout.build_layout([_borehole("1", "10"), _borehole("2", "9")])
    first, second = model.columns
    assert first.x == 130
    assert second.x == 130 + 420 + 50
    assert first.depth_strip.x == 130
    assert first.litho_strip.x == 160
    assert first.params_strip.x == 210
    assert first.description_strip.x == 310
    assert first.spt_strip.x == 130 + 420 - 100
    assert first.description_strip.right == first.spt_strip.x
    assert first.header_box.y == 100 - 80


def test_layer_boundaries_align_with_grid_lines():
    boreholes = [
        _borehole("1", "10", layers=[(0, 2), (2, 5)]),
        _borehole("2", "9", layers=[(0, 1), (1, 4)]),
    ]
    model = layout.build_layout(boreholes)
    grid_y = {line.elevation: line.y for line in model.grid_lines}
    for column in model.columns:
        for layer in column.layers:
            top_elevation = column.surface_elevation - layer.depth_from
            bottom_elevation = column.surface_elevation - layer.depth_to
            assert layer.litho.y == model.scale.pixel_y(top_elevation) == grid_y[top_elevation]
            assert layer.litho.bottom == model.scale.pixel_y(bottom_elevation) == grid_y[bottom_elevation]
    # Both columns put elevation 8 on the same row
    assert model.columns[0].layers[0].litho.bottom == model.columns[1].layers[0].litho.bottom


def test_degenerate_layer_has_zero_height():
    borehole = _borehole("1", "10", layers=[(0, 5), (5, 5), (5, 8)])
    model = layout.build_layout([borehole, _borehole("2", "10")])
    first, degenerate, after = model.columns[0].layers
    assert degenerate.litho.height == 0
    assert degenerate.label_y == degenerate.litho.y
    assert degenerate.litho.y == first.litho.bottom
    assert after.litho.y == degenerate.litho.y
    assert after.litho.height == 3 * 70


def test_layer_label_is_clamped():
    model = layout.build_layout([_borehole("1", "10", layers=[(0, 4), (4, 4.1)]), _borehole("2", "10")])
    thick, thin = model.columns[0].layers
    assert thick.label_y == thick.litho.y + 15
    assert thin.label_y == pytest.approx(thin.litho.y + thin.litho.height / 2)
    assert thick.depth_label == "4"
    assert thick.params_text == ("-", "-", "-")


def test_spt_points_are_clamped_and_ordered():
    borehole = _borehole("1", "10", spt=[(6.0, 75), (1.5, 25), (3.0, 0)])
    model = layout.build_layout([borehole, _borehole("2", "10")])
    column = model.columns[0]
    strip_x = column.spt_strip.x
    assert [p.depth for p in column.spt_points] == [1.5, 3.0, 6.0]
    assert [p.x - strip_x for p in column.spt_points] == [50.0, 0.0, 100.0]
    deepest = column.spt_points[-1]
    assert deepest.value == 75
    assert deepest.plotted_value == 50
    assert deepest.y == model.scale.depth_y(10, 6.0)
    assert column.spt_polyline == tuple((p.x, p.y) for p in column.spt_points)


def test_spt_offsets():
    offsets = layout.spt_offsets([0, 25, 50, 120], strip_width=100)
    assert list(offsets) == [0.0, 50.0, 100.0, 100.0]


def test_water_table_marker():
    wet = _borehole("1", "10", water_table="water found at 3.5 m")
    dry = _borehole("2", "10")
    model = layout.build_layout([wet, dry])
    assert model.columns[0].water_table_depth == 3.5
    assert model.columns[0].water_table_y == model.scale.pixel_y(10 - 3.5)
    assert model.columns[1].water_table_y is None


def test_empty_input_is_a_precondition_failure():
    with pytest.raises(ValueError, match="at least one borehole"):
        layout.build_layout([])


def test_layout_is_deterministic():
    boreholes = [_borehole("1", "10", layers=[(0, 2)], spt=[(1, 5)]), _borehole("2", "8", layers=[(0, 3)])]
    assert layout.build_layout(boreholes) == layout.build_layout(boreholes)


def test_title_block_and_extent():
    model = layout.build_layout([_borehole("1", "10"), _borehole("2", "9")])
    assert model.project_name == "Harbour"
    assert model.title_block.x == model.width - 450
    assert model.title_block.y == model.height - 180
    extent = model.extent
    assert extent.width == model.width
    assert extent.height == model.height
    for column in model.columns:
        assert extent.contains(column.frame.box)
    assert extent.contains(model.title_block.box)


def test_layout_frames():
    boreholes = [_borehole("1", "10", layers=[(0, 2), (2, 4)], spt=[(1, 5)]), _borehole("2", "9", layers=[(0, 1)])]
    model = layout.build_layout(boreholes)
    layers = layout.layer_frame(model)
    assert len(layers) == 3
    assert layers["borehole_name"].tolist() == ["1", "1", "2"]
    spt = layout.spt_frame(model)
    assert spt.shape == (1, 6)
    grid = layout.grid_frame(model)
    assert len(grid) == len(model.grid_lines)


def test_layout_config_update_and_copy():
    config = LayoutConfig()
    tuned = config.copy().update(column_width=300, spt_strip_width=80)
    assert tuned.column_width == 300
    assert config.column_width == 420
    assert tuned.to_dict()["spt_strip_width"] == 80
    with pytest.raises(ValueError, match="Unknown layout setting"):
        config.update(colour="red")
    model = layout.build_layout([_borehole("1", "10"), _borehole("2", "9")], tuned)
    assert model.columns[0].spt_strip.x == model.columns[0].x + 300 - 80

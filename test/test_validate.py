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

from boresection.borehole import validate
from boresection.borehole.model import CanonicalBorehole, HeaderData, SoilLayer, SPTRecord


def _borehole(layers=(), spt=(), **header):
    header.setdefault("borehole_name", "A")
    return CanonicalBorehole(
        internal_id="a",
        header=HeaderData(**header),
        layers=tuple(SoilLayer(id=f"l{i}", depth_from=f, depth_to=t) for i, (f, t) in enumerate(layers)),
        spt=tuple(SPTRecord(id=f"s{i}", depth=d, value=v) for i, (d, v) in enumerate(spt)),
    )


def test_validate_layers_flags_overlap_and_non_positive_length():
    borehole = _borehole(layers=[(0, 2), (1.5, 3), (3, 3), (4, 3.5)])
    types = [issue["type"] for issue in validate.validate_layers(borehole)]
    assert types.count("overlap") == 1
    assert types.count("non_positive_length") == 2


def test_validate_layers_clean_log_has_no_issues():
    assert validate.validate_layers(_borehole(layers=[(0, 1), (1, 2.5), (2.5, 6)])) == []


def test_validate_spt_flags_negative_values():
    issues = validate.validate_spt(_borehole(spt=[(-1.0, 5), (2.0, -3)]))
    assert [issue["type"] for issue in issues] == ["negative_depth", "negative_value"]


def test_report_missing_header_fields():
    borehole = _borehole(project_name="Harbour", date="2024-01-01", elevation="0.00", coordinates="E 1", client="City")
    assert validate.report_missing_header_fields(borehole) == ["elevation", "water_table"]


def test_validate_boreholes_aggregates():
    boreholes = [_borehole(layers=[(0, 2), (1, 3)]), _borehole(borehole_name="B", spt=[(1, -2)])]
    issues = validate.validate_boreholes(boreholes)
    types = {(issue["borehole"], issue["type"]) for issue in issues}
    assert ("A", "overlap") in types
    assert ("B", "negative_value") in types
    assert ("B", "missing_header_fields") in types

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

"""QA/QC helpers for canonical boreholes.

Checks return lists of issue dicts rather than raising, so a reviewer can fix
the extraction before the section is drawn.
"""

from boresection.datamodel import BOREHOLE_NAME, HEADER_FIELDS, PLACEHOLDERS


def validate_layers(borehole):
    issues = []
    prev_to = None
    for layer in borehole.layers:
        if layer.depth_from < 0 or layer.depth_to < 0:
            issues.append({"borehole": borehole.name, "type": "negative_depth", "layer_id": layer.id})
        if layer.depth_to <= layer.depth_from:
            issues.append({"borehole": borehole.name, "type": "non_positive_length", "layer_id": layer.id,
                            "depth_from": layer.depth_from, "depth_to": layer.depth_to})
        if prev_to is not None and layer.depth_from < prev_to:
            issues.append({"borehole": borehole.name, "type": "overlap", "layer_id": layer.id,
                            "depth_from": layer.depth_from, "previous_to": prev_to})
        prev_to = layer.depth_to if prev_to is None else max(prev_to, layer.depth_to)
    return issues


def validate_spt(borehole):
    issues = []
    for record in borehole.spt:
        if record.depth < 0:
            issues.append({"borehole": borehole.name, "type": "negative_depth", "record_id": record.id})
        if record.value < 0:
            issues.append({"borehole": borehole.name, "type": "negative_value", "record_id": record.id,
                            "value": record.value})
    return issues


def report_missing_header_fields(borehole):
    missing = []
    for name in HEADER_FIELDS:
        if name == BOREHOLE_NAME:
            continue
        value = (getattr(borehole.header, name) or "").strip()
        if not value or value == PLACEHOLDERS.get(name):
            missing.append(name)
    return missing


def validate_boreholes(boreholes):
    """Run every check over a collection of boreholes."""
    issues = []
    for borehole in boreholes:
        issues.extend(validate_layers(borehole))
        issues.extend(validate_spt(borehole))
        missing = report_missing_header_fields(borehole)
        if missing:
            issues.append({"borehole": borehole.name, "type": "missing_header_fields", "fields": missing})
    return issues

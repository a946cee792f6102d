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

"""
Boresection Data Model

Provides a consistent set of field names for borehole log fragments, canonical
boreholes and their layers and SPT records.

Fragment parsers apply a common field mapping, so the many spellings an
extraction service or a spreadsheet may use all land on the same keys.
"""

# Header fields
BOREHOLE_NAME = "borehole_name"
PROJECT_NAME = "project_name"
DATE = "date"
ELEVATION = "elevation"
COORDINATES = "coordinates"
CLIENT = "client"
WATER_TABLE = "water_table"

# Soil layer fields
DEPTH_FROM = "depth_from"
DEPTH_TO = "depth_to"
DESCRIPTION = "description"
USCS = "uscs"
FINE_PERCENT = "fine_percent"
PLASTICITY = "plasticity"
SWELLING = "swelling"
COLOR_TEXT = "color_text"
COLOR = "color"
PATTERN = "pattern"

# SPT fields
DEPTH = "depth"
VALUE = "value"
NOTES = "notes"

HEADER_FIELDS = (PROJECT_NAME, BOREHOLE_NAME, DATE, ELEVATION, COORDINATES, CLIENT, WATER_TABLE)
LAYER_FIELDS = (DEPTH_FROM, DEPTH_TO, DESCRIPTION, USCS, FINE_PERCENT, PLASTICITY, SWELLING, COLOR_TEXT)
SPT_FIELDS = (DEPTH, VALUE, NOTES)

# A single document run describes one project, so these are shared by every borehole
PROJECT_WIDE_FIELDS = (PROJECT_NAME, CLIENT)

# Values the extraction service writes when it could not read a field
ELEVATION_PLACEHOLDER = "0.00"
WATER_TABLE_PLACEHOLDER = "-"
PLACEHOLDERS = {
    ELEVATION: ELEVATION_PLACEHOLDER,
    WATER_TABLE: WATER_TABLE_PLACEHOLDER,
}

PATTERNS = ("dots", "diagonal", "circles", "solid", "none")


# Best-guess mapping from the spellings seen in extraction output and log spreadsheets
# to the boresection field names. Keys are normalized to lowercase and stripped of
# whitespace before lookup, so only list each variant once.
# Do not map one source spelling to several fields.
DEFAULT_FIELD_MAP = {
    BOREHOLE_NAME: ["borehole_name", "boreholename", "borehole name", "borehole", "borehole_id", "boreholeid", "hole_id", "holeid", "bh", "loca_id"],
    PROJECT_NAME: ["project_name", "projectname", "project name", "project"],
    DATE: ["date", "drill_date", "drilldate", "date_drilled"],
    ELEVATION: ["elevation", "elev", "rl", "ground_level", "groundlevel"],
    COORDINATES: ["coordinates", "coords", "location"],
    CLIENT: ["client", "customer"],
    WATER_TABLE: ["water_table", "watertable", "water table", "gwl", "groundwater"],
    DEPTH_FROM: ["depth_from", "depthfrom", "from", "from_depth", "fromdepth", "top", "geol_top"],
    DEPTH_TO: ["depth_to", "depthto", "to", "to_depth", "todepth", "base", "bottom", "geol_base"],
    DESCRIPTION: ["description", "desc", "soil_description", "geol_desc"],
    USCS: ["uscs", "uscs_code", "classification", "soil_code", "geol_leg"],
    FINE_PERCENT: ["fine_percent", "finepercent", "fines", "fines_percent", "fines %", "fine %"],
    PLASTICITY: ["plasticity", "pi"],
    SWELLING: ["swelling", "swelling_potential", "swell"],
    COLOR_TEXT: ["color_text", "colortext", "colour", "color_name"],
    DEPTH: ["depth", "spt_depth", "ispt_top"],
    VALUE: ["value", "n", "n_value", "blows", "blow_count", "ispt_nval"],
    NOTES: ["notes", "note", "remarks", "ispt_rep"],
}

# Pivot the DEFAULT_FIELD_MAP for efficient reverse lookup
# Maps normalized source keys -> boresection field names
FIELD_LOOKUP = {}
for standard_field, variations in DEFAULT_FIELD_MAP.items():
    for variation in variations:
        FIELD_LOOKUP[variation.lower().strip()] = standard_field

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

"""Fragment parsing and table normalization helpers for borehole log extractions.

Accepts the JSON the extraction service returns, already-decoded dicts, or
pandas tables, and maps every spelling of a field onto the boresection data
model so the reconciliation engine can expect consistent keys. Shape defects
are absorbed here: unknown keys are ignored, unparsable numbers become absent
and nothing raises on a malformed fragment.
"""

import dataclasses
import json
import logging
import math
import re
from pathlib import Path

import pandas as pd

from boresection.datamodel import (
    BOREHOLE_NAME,
    DEPTH,
    DEPTH_FROM,
    DEPTH_TO,
    FIELD_LOOKUP,
    HEADER_FIELDS,
    LAYER_FIELDS,
    NOTES,
    VALUE,
)
from .model import (
    HeaderFragment,
    LayerFragment,
    RawFragment,
    SoilLayer,
    SPTFragment,
    SPTRecord,
)

logger = logging.getLogger(__name__)

_LAYER_SECTION_KEYS = ("layers", "stratigraphy", "strata", "soil_layers", "soillayers")
_SPT_SECTION_KEYS = ("spt", "spt_records", "sptrecords", "spt_tests")

_FENCE_RE = re.compile(r"```(?:json)?\s*|```", re.IGNORECASE)
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")
_LEADING_NUMBER_RE = re.compile(r"^-?\d+(?:\.\d+)?")


def _frame(df):
    if df is None:
        return pd.DataFrame()
    if isinstance(df, pd.DataFrame):
        return df.copy()
    return pd.DataFrame(df)


def _is_missing(value):
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _to_float(value):
    if _is_missing(value) or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _to_text(value):
    if _is_missing(value) or isinstance(value, (list, tuple, dict, set)):
        return None
    return str(value).strip()


def parse_blow_count(value):
    """Read an SPT blow count from a number or a log-style string.

    ``"23"`` and ``"23 (5,10,13)"`` give the total. When only the increments
    are present, ``"(5,10,13)"``, the last two are summed. Refusal notation such
    as ``"50/10cm"`` keeps the leading count.
    """
    number = _to_float(value)
    if number is not None or _is_missing(value):
        return number
    text = str(value).strip()
    head, paren, tail = text.partition("(")
    lead = _LEADING_NUMBER_RE.match(head.strip())
    if lead:
        return float(lead.group())
    if paren:
        counts = [float(n) for n in _NUMBER_RE.findall(tail)]
        if counts:
            return sum(counts[-2:])
    return None


def standardize_keys(raw):
    """Map the keys of a dict onto boresection field names; first spelling wins."""
    out = {}
    for key, val in raw.items():
        mapped = FIELD_LOOKUP.get(str(key).lower().strip())
        if mapped is not None and mapped not in out:
            out[mapped] = val
    return out


def standardize_columns(df, field_map=None):
    lookup = dict(FIELD_LOOKUP)
    if field_map:
        lookup.update({
            str(raw_name).lower().strip(): str(expected_name).lower().strip()
            for raw_name, expected_name in field_map.items()
            if raw_name is not None and expected_name is not None
        })

    renamed = {}
    for col in df.columns:
        key = str(col).lower().strip()
        renamed[col] = lookup.get(key, key)
    out = df.rename(columns=renamed)
    if not out.columns.is_unique:
        out = out.T.groupby(level=0, sort=False).first().T
    return out


def header_from_dict(raw):
    fields = standardize_keys(raw)
    return HeaderFragment(**{name: _to_text(fields.get(name)) for name in HEADER_FIELDS})


def layer_from_dict(raw):
    fields = standardize_keys(raw)
    values = {}
    for name in LAYER_FIELDS:
        if name in (DEPTH_FROM, DEPTH_TO):
            values[name] = _to_float(fields.get(name))
        else:
            values[name] = _to_text(fields.get(name))
    return LayerFragment(**values)


def spt_from_dict(raw):
    fields = standardize_keys(raw)
    return SPTFragment(
        depth=_to_float(fields.get(DEPTH)),
        value=parse_blow_count(fields.get(VALUE)),
        notes=_to_text(fields.get(NOTES)),
    )


def _section(raw, candidates):
    for key, val in raw.items():
        if str(key).lower().strip() in candidates:
            return val
    return None


def _dict_items(items, label):
    if items is None:
        return []
    if isinstance(items, dict):
        items = [items]
    if not isinstance(items, (list, tuple)):
        logger.debug("Ignoring %s section of type %s", label, type(items).__name__)
        return []
    kept = [item for item in items if isinstance(item, dict)]
    if len(kept) != len(items):
        logger.debug("Skipped %d malformed %s entries", len(items) - len(kept), label)
    return kept


def fragment_from_dict(raw, source=None):
    """Build a RawFragment from one borehole object of the extraction output.

    The header may be nested under ``"header"`` or given flat next to the
    layer and SPT lists.
    """
    if not isinstance(raw, dict):
        return RawFragment(source=source)
    header_raw = raw.get("header")
    if not isinstance(header_raw, dict):
        header_raw = {key: val for key, val in raw.items() if not isinstance(val, (list, dict))}
    return RawFragment(
        header=header_from_dict(header_raw),
        layers=[layer_from_dict(item) for item in _dict_items(_section(raw, _LAYER_SECTION_KEYS), "layer")],
        spt=[spt_from_dict(item) for item in _dict_items(_section(raw, _SPT_SECTION_KEYS), "spt")],
        source=source,
    )


def parse_oracle_response(text):
    """Decode the extraction service's JSON reply into a list of borehole dicts.

    Markdown code fences around the JSON are removed first. Invalid JSON raises
    ``ValueError`` so the caller can count the input unit as failed.
    """
    if text is None or not str(text).strip():
        raise ValueError("Extraction response is empty")
    cleaned = _FENCE_RE.sub("", str(text)).strip()
    decoded = json.loads(cleaned)
    if isinstance(decoded, dict):
        for key in ("boreholes", "items", "data"):
            if isinstance(decoded.get(key), list):
                return decoded[key]
        return [decoded]
    if isinstance(decoded, list):
        return decoded
    raise ValueError(f"Unsupported extraction response of type {type(decoded).__name__}")


def load_fragments(source, source_label=None):
    """Load raw fragments from dicts, RawFragments, JSON text or a ``.json`` file."""
    if source is None:
        return []
    if isinstance(source, RawFragment):
        return [source]
    if isinstance(source, dict):
        return [fragment_from_dict(source, source=source_label)]
    if isinstance(source, Path) or (isinstance(source, str) and source.strip().lower().endswith(".json")):
        path = Path(source)
        return load_fragments(parse_oracle_response(path.read_text(encoding="utf-8")), source_label or path.name)
    if isinstance(source, str):
        return load_fragments(parse_oracle_response(source), source_label)

    fragments = []
    for item in source:
        if isinstance(item, RawFragment):
            fragments.append(item)
        elif isinstance(item, dict):
            fragments.append(fragment_from_dict(item, source=source_label))
        else:
            logger.debug("Skipping fragment entry of type %s", type(item).__name__)
    return fragments


def _name_series(df):
    if BOREHOLE_NAME not in df.columns:
        return pd.Series([""] * len(df), index=df.index, dtype=object)
    return df[BOREHOLE_NAME].map(lambda val: _to_text(val) or "")


def fragments_from_tables(headers=None, layers=None, spt=None, source=None, field_map=None):
    """Group header, layer and SPT tables into one fragment per borehole name.

    Names keep their order of first appearance across the three tables. Rows
    without a name are grouped under ``""`` and later dropped by reconciliation.
    """
    tables = {}
    for label, table in (("headers", headers), ("layers", layers), ("spt", spt)):
        df = standardize_columns(_frame(table), field_map=field_map)
        if not df.empty:
            df = df.assign(**{BOREHOLE_NAME: _name_series(df)})
        tables[label] = df

    names = []
    for df in tables.values():
        if df.empty:
            continue
        for name in df[BOREHOLE_NAME]:
            if name not in names:
                names.append(name)

    fragments = []
    for name in names:
        fragment = RawFragment(header=HeaderFragment(borehole_name=name), source=source)
        header_rows = tables["headers"]
        if not header_rows.empty:
            matched = header_rows[header_rows[BOREHOLE_NAME] == name]
            if not matched.empty:
                fragment.header = header_from_dict(matched.iloc[0].to_dict())
        layer_rows = tables["layers"]
        if not layer_rows.empty:
            matched = layer_rows[layer_rows[BOREHOLE_NAME] == name]
            fragment.layers = [layer_from_dict(row) for row in matched.to_dict("records")]
        spt_rows = tables["spt"]
        if not spt_rows.empty:
            matched = spt_rows[spt_rows[BOREHOLE_NAME] == name]
            fragment.spt = [spt_from_dict(row) for row in matched.to_dict("records")]
        fragments.append(fragment)
    return fragments


# Keyword groups for USCS inference; a rule matches when every group has a hit.
# Hebrew terms cover the logs the extraction prompt was written for.
_SAND = ("sand", "חול")
_CLEAN = ("clean", "kurkar", "כורכר", "נקי")
_CLAYEY = ("clayey", "חרסיתי")
_CLAY = ("clay", "חרסית")
_FAT = ("fat", "high plasticity", "שמנה")
_FILL = ("fill", "מילוי")
_GRAVEL = ("gravel", "חצץ")

_USCS_RULES = (
    ("SP", (_SAND, _CLEAN)),
    ("SC", (_SAND, _CLAYEY)),
    ("CH", (_CLAY, _FAT)),
    ("CL", (_CLAY,)),
    ("Fill", (_FILL,)),
    ("GP", (_GRAVEL,)),
    ("SP", (_SAND,)),
)
DEFAULT_USCS = "CL"


def infer_uscs(description):
    """Guess a USCS code from a free-text soil description."""
    if not description:
        return DEFAULT_USCS
    text = description.lower()
    for code, groups in _USCS_RULES:
        if all(any(word in text for word in group) for group in groups):
            return code
    return DEFAULT_USCS


def uscs_pattern(uscs):
    code = uscs.upper() if uscs else ""
    if "S" in code and "C" not in code and "M" not in code:
        return "dots"
    if "C" in code or "CLAY" in code:
        return "diagonal"
    if "G" in code or "GRAVEL" in code:
        return "circles"
    if "FILL" in code:
        return "solid"
    return "diagonal"


def uscs_color(uscs):
    code = uscs.upper() if uscs else ""
    if "SAND" in code or code == "SP":
        return "#FEF9C3"
    if "CLAY" in code or code == "CH":
        return "#D7CCC8"
    if "FILL" in code:
        return "#DCFCE7"
    return "#FFFFFF"


def _depth(value):
    number = _to_float(value)
    return 0.0 if number is None else number


def to_soil_layer(layer, layer_id):
    """Canonical layer from a fragment layer: missing depths become 0, USCS is inferred if absent."""
    description = _to_text(layer.description) or ""
    uscs = _to_text(layer.uscs) or infer_uscs(description)
    return SoilLayer(
        id=layer_id,
        depth_from=_depth(layer.depth_from),
        depth_to=_depth(layer.depth_to),
        description=description,
        uscs=uscs,
        fine_percent=_to_text(layer.fine_percent),
        plasticity=_to_text(layer.plasticity),
        swelling=_to_text(layer.swelling),
        color_text=_to_text(layer.color_text),
        color=uscs_color(uscs),
        pattern=uscs_pattern(uscs),
    )


def to_spt_record(record, record_id):
    return SPTRecord(
        id=record_id,
        depth=_depth(record.depth),
        value=parse_blow_count(record.value) or 0.0,
        notes=_to_text(record.notes) or "",
    )


def boreholes_to_frames(boreholes):
    """Flatten canonical boreholes into header, layer and SPT DataFrames."""
    headers = []
    layers = []
    spt = []
    for borehole in boreholes:
        headers.append({"internal_id": borehole.internal_id, **dataclasses.asdict(borehole.header)})
        for layer in borehole.layers:
            layers.append({BOREHOLE_NAME: borehole.name, **dataclasses.asdict(layer)})
        for record in borehole.spt:
            spt.append({BOREHOLE_NAME: borehole.name, **dataclasses.asdict(record)})

    layer_cols = [BOREHOLE_NAME] + [f.name for f in dataclasses.fields(SoilLayer)]
    spt_cols = [BOREHOLE_NAME] + [f.name for f in dataclasses.fields(SPTRecord)]
    return {
        "headers": pd.DataFrame(headers, columns=["internal_id"] + list(HEADER_FIELDS)),
        "layers": pd.DataFrame(layers, columns=layer_cols),
        "spt": pd.DataFrame(spt, columns=spt_cols),
    }

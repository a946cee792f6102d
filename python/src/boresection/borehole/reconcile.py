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

"""Reconciliation of per-page borehole fragments into canonical boreholes.

Fragments are keyed by their trimmed borehole name. The first fragment seen for
a name starts a borehole; later ones are merged into it:

- layers are appended, sorted by depth and de-duplicated on the exact
  ``(depth_from, depth_to)`` pair, keeping the earliest arrival;
- SPT records are appended, sorted and de-duplicated on exact depth, keeping
  the earliest arrival;
- header fields are back-filled only where the existing value is empty or a
  placeholder.

Project name and client belong to the whole run rather than to one borehole.
They are resolved after the per-borehole merge and written to every borehole
with :func:`apply_project_field`.

Names are compared after trimming only, so ``"bh-1"`` and ``"BH-1"`` stay two
boreholes.
"""

import dataclasses
import logging
import re
import unicodedata
import uuid

from boresection.datamodel import (
    BOREHOLE_NAME,
    HEADER_FIELDS,
    PLACEHOLDERS,
    PROJECT_WIDE_FIELDS,
)
from .data import fragment_from_dict, layer_from_dict, spt_from_dict, to_soil_layer, to_spt_record
from .model import CanonicalBorehole, HeaderData, HeaderFragment, LayerFragment, RawFragment, SPTFragment

logger = logging.getLogger(__name__)

_DIGITS_RE = re.compile(r"([0-9]+)")

_BACKFILL_FIELDS = tuple(
    name for name in HEADER_FIELDS if name not in PROJECT_WIDE_FIELDS and name != BOREHOLE_NAME
)


class NoUsableDataError(ValueError):
    """No fragment could be attributed to a borehole."""


def _new_id():
    return uuid.uuid4().hex


def borehole_key(name):
    return "" if name is None else str(name).strip()


def _header_text(header, field):
    value = getattr(header, field)
    return "" if value is None else str(value)


def _fold(text):
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def natural_sort_key(name):
    """Sort key comparing digit runs by value and text ignoring case and accents.

    ``"BH-2"`` sorts before ``"BH-10"`` and ``"2"`` before ``"10"``.
    """
    name = name or ""
    parts = []
    for idx, chunk in enumerate(_DIGITS_RE.split(name)):
        if not chunk:
            continue
        if idx % 2:
            parts.append((0, int(chunk), chunk))
        else:
            parts.append((1, 0, _fold(chunk)))
    return tuple(parts), name


def _is_blank(field, value):
    text = (value or "").strip()
    return not text or text == PLACEHOLDERS.get(field)


def _dedup_layers(layers):
    ordered = sorted(layers, key=lambda layer: (layer.depth_from, layer.depth_to))
    seen = set()
    kept = []
    for layer in ordered:
        key = (layer.depth_from, layer.depth_to)
        if key in seen:
            continue
        seen.add(key)
        kept.append(layer)
    return tuple(kept)


def _dedup_spt(records):
    ordered = sorted(records, key=lambda record: record.depth)
    seen = set()
    kept = []
    for record in ordered:
        if record.depth in seen:
            continue
        seen.add(record.depth)
        kept.append(record)
    return tuple(kept)


def _coerce_fragment(fragment):
    if isinstance(fragment, dict):
        return fragment_from_dict(fragment)
    if not isinstance(fragment, RawFragment):
        return None
    if not isinstance(fragment.header, HeaderFragment):
        fragment = dataclasses.replace(fragment, header=HeaderFragment())
    return fragment


def _fragment_rows(items, fragment_type, from_dict):
    rows = []
    for item in items or []:
        if isinstance(item, fragment_type):
            rows.append(item)
        elif isinstance(item, dict):
            rows.append(from_dict(item))
    return rows


def _convert(fragment, id_factory, taken=()):
    fragment_id = fragment.fragment_id or id_factory()
    # Row ids are unique within a borehole, also when fragment ids repeat
    prefix = fragment_id
    taken = set(taken)
    while any(row_id.startswith(f"{prefix}-") for row_id in taken):
        prefix = id_factory()
    layers = [
        to_soil_layer(layer, f"{prefix}-layer-{idx}")
        for idx, layer in enumerate(_fragment_rows(fragment.layers, LayerFragment, layer_from_dict))
    ]
    spt = [
        to_spt_record(record, f"{prefix}-spt-{idx}")
        for idx, record in enumerate(_fragment_rows(fragment.spt, SPTFragment, spt_from_dict))
    ]
    return fragment_id, layers, spt


def _header_from_fragment(header):
    values = {name: _header_text(header, name) for name in HEADER_FIELDS}
    values[BOREHOLE_NAME] = borehole_key(header.borehole_name)
    for name, placeholder in PLACEHOLDERS.items():
        if not values[name].strip():
            values[name] = placeholder
    return HeaderData(**values)


def start_borehole(fragment, id_factory=None):
    """Create the canonical borehole for the first fragment seen under a name."""
    id_factory = id_factory or _new_id
    fragment_id, layers, spt = _convert(fragment, id_factory)
    return CanonicalBorehole(
        internal_id=fragment_id,
        header=_header_from_fragment(fragment.header),
        layers=_dedup_layers(layers),
        spt=_dedup_spt(spt),
    )


def merge_fragment(borehole, fragment, id_factory=None):
    """Return ``borehole`` with ``fragment`` merged in; the input is left unchanged."""
    if borehole_key(fragment.header.borehole_name) != borehole.name:
        raise ValueError(
            f"Fragment for '{fragment.header.borehole_name}' cannot be merged into borehole '{borehole.name}'"
        )
    id_factory = id_factory or _new_id
    taken = [row.id for row in borehole.layers] + [row.id for row in borehole.spt]
    _, layers, spt = _convert(fragment, id_factory, taken)

    incoming = _header_from_fragment(fragment.header)
    backfilled = {
        name: getattr(incoming, name)
        for name in _BACKFILL_FIELDS
        if _is_blank(name, getattr(borehole.header, name)) and not _is_blank(name, getattr(incoming, name))
    }

    merged_layers = _dedup_layers(list(borehole.layers) + layers)
    merged_spt = _dedup_spt(list(borehole.spt) + spt)
    logger.debug(
        "Merged fragment into %s: %d/%d layers kept, %d/%d SPT kept, back-filled %s",
        borehole.name,
        len(merged_layers),
        len(borehole.layers) + len(layers),
        len(merged_spt),
        len(borehole.spt) + len(spt),
        sorted(backfilled) or "nothing",
    )
    return dataclasses.replace(
        borehole,
        header=dataclasses.replace(borehole.header, **backfilled),
        layers=merged_layers,
        spt=merged_spt,
    )


def apply_project_field(boreholes, field, value):
    """Write a project-wide header field to every borehole in the collection."""
    if field not in PROJECT_WIDE_FIELDS:
        raise ValueError(f"{field} is not a project-wide field; expected one of {PROJECT_WIDE_FIELDS}")
    value = "" if value is None else str(value)
    return [
        dataclasses.replace(borehole, header=dataclasses.replace(borehole.header, **{field: value}))
        for borehole in boreholes
    ]


def set_header_field(borehole, field, value):
    """Edit one header field of a single borehole."""
    if field in PROJECT_WIDE_FIELDS:
        raise ValueError(f"{field} is shared by the whole project; use apply_project_field")
    if field not in HEADER_FIELDS:
        raise ValueError(f"Unknown header field: {field}")
    value = "" if value is None else str(value)
    if field == BOREHOLE_NAME:
        value = borehole_key(value)
    return dataclasses.replace(borehole, header=dataclasses.replace(borehole.header, **{field: value}))


def reconcile(fragments, id_factory=None):
    """Merge raw fragments into canonical boreholes sorted by natural name order.

    Fragments without a usable borehole name are dropped. Malformed entries
    never raise; an empty result is returned as an empty list and left to
    :func:`require_boreholes`.
    """
    id_factory = id_factory or _new_id
    merged = {}
    named = []
    dropped = 0
    for raw in fragments or []:
        fragment = _coerce_fragment(raw)
        if fragment is None:
            dropped += 1
            continue
        name = borehole_key(fragment.header.borehole_name)
        if not name:
            dropped += 1
            continue
        named.append(fragment)
        if name in merged:
            merged[name] = merge_fragment(merged[name], fragment, id_factory)
        else:
            merged[name] = start_borehole(fragment, id_factory)

    if dropped:
        logger.debug("Dropped %d fragments without a borehole name", dropped)

    boreholes = sorted(merged.values(), key=lambda borehole: natural_sort_key(borehole.name))
    for field in PROJECT_WIDE_FIELDS:
        value = next(
            (_header_text(f.header, field).strip() for f in named if _header_text(f.header, field).strip()),
            None,
        )
        if value is not None:
            boreholes = apply_project_field(boreholes, field, value)

    logger.debug("Reconciled %d fragments into %d boreholes", len(named), len(boreholes))
    return boreholes


def require_boreholes(boreholes):
    """Fail loudly when reconciliation produced nothing to lay out."""
    boreholes = list(boreholes or [])
    if not boreholes:
        raise NoUsableDataError("No usable borehole data: no fragment carried a borehole name")
    return boreholes

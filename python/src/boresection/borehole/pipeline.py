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

"""Orchestration from input units to a laid-out section.

The extraction service is called once per input unit (a page, an image, a
converted sheet), in order, with an optional pause between calls to stay under
its rate limits. A failing call only means that unit contributes no fragments;
the failure is logged and counted. Reconciliation producing no borehole at all
is the one hard failure at this boundary.
"""

import logging
import time
from dataclasses import dataclass, field

from .data import load_fragments, parse_oracle_response
from .layout import build_layout
from .reconcile import reconcile, require_boreholes

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    fragments: list = field(default_factory=list)
    # Indices of the input units whose extraction failed
    failed_units: list = field(default_factory=list)


@dataclass
class SectionResult:
    boreholes: list
    layout: object
    failed_units: list = field(default_factory=list)


def _unit_fragments(reply, label):
    if isinstance(reply, (str, bytes)):
        text = reply.decode("utf-8") if isinstance(reply, bytes) else reply
        return load_fragments(parse_oracle_response(text), source_label=label)
    return load_fragments(reply, source_label=label)


def extract_fragments(units, oracle, delay=0.0, sleep=time.sleep):
    """Call ``oracle(unit)`` for each unit and collect the fragments it returns.

    The oracle may return JSON text, a dict, a list of dicts or RawFragments.
    """
    result = ExtractionResult()
    total = 0
    for index, unit in enumerate(units):
        total += 1
        if index > 0 and delay > 0:
            sleep(delay)
        label = f"unit-{index + 1}"
        try:
            fragments = _unit_fragments(oracle(unit), label)
        except Exception as exc:
            logger.warning("Extraction failed for %s: %s", label, exc)
            result.failed_units.append(index)
            continue
        for fragment in fragments:
            if fragment.source is None:
                fragment.source = label
        logger.debug("%s yielded %d fragments", label, len(fragments))
        result.fragments.extend(fragments)

    if result.failed_units:
        logger.warning("%d of %d input units failed extraction", len(result.failed_units), total)
    return result


def build_section(units, oracle, config=None, delay=0.0, sleep=time.sleep, id_factory=None):
    """Extract, reconcile and lay out a set of input units.

    Raises ``NoUsableDataError`` when no fragment could be attributed to a borehole.
    """
    extraction = extract_fragments(units, oracle, delay=delay, sleep=sleep)
    boreholes = require_boreholes(reconcile(extraction.fragments, id_factory=id_factory))
    layout = build_layout(boreholes, config=config)
    return SectionResult(boreholes=boreholes, layout=layout, failed_units=extraction.failed_units)

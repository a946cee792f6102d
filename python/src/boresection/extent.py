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

import shapely.geometry


class CanvasExtent():

    def __init__(self, xmin=None, xmax=None, ymin=None, ymax=None, bbox=None, name=None):
        """
        Create a canvas extent: an axis-aligned box in pixel space, y growing downward.

        Pass either:
        @param bbox - the box as a shapely.geometry.box object
        OR
        @param xmin, xmax, ymin, ymax - the coordinates of the box edges

        @param name - optional name for the extent
        """
        if bbox is None:
            self.bbox = shapely.geometry.box(xmin, ymin, xmax, ymax)
        else:
            self.bbox = bbox
        self.set_minmax()
        self.name = name

    def set_minmax(self):
        self.xmin, self.ymin, self.xmax, self.ymax = self.bbox.bounds

    @property
    def width(self):
        return self.xmax - self.xmin

    @property
    def height(self):
        return self.ymax - self.ymin

    def center(self):
        """Return the box center as (x, y)."""
        return (self.xmin + self.xmax) / 2.0, (self.ymin + self.ymax) / 2.0

    def contains(self, other):
        """True when ``other`` (an extent or a shapely geometry) lies inside or on the boundary."""
        geom = other.bbox if isinstance(other, CanvasExtent) else other
        return self.bbox.covers(geom)

    def get_svg_viewbox(self):
        """Return the extent formatted for an SVG viewBox attribute."""
        return f"{self.xmin:g} {self.ymin:g} {self.width:g} {self.height:g}"

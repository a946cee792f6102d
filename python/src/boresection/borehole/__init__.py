# Copyright (C) 2026 Darkmine Pty Ltd
# SPDX-License-Identifier: GPL-3.0-or-later

from . import data, layout, model, pipeline, reconcile, validate

__all__ = [
	"data",
	"layout",
	"model",
	"pipeline",
	"reconcile",
	"validate",
]

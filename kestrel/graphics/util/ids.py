# kestrel/graphics/util/ids.py
from __future__ import annotations

from typing import NewType

ShaderId = NewType("ShaderId", str)

"""
* This file is part of PYSEGVIZ
*
* Copyright (C) 2026-present the PYSEGVIZ authors
*
* PYSEGVIZ is free software: you can redistribute it and/or modify
* it under the terms of the GNU General Public License as published by
* the Free Software Foundation, either version 3 of the License, or
* (at your option) any later version.
*
* PYSEGVIZ is distributed in the hope that it will be useful,
* but WITHOUT ANY WARRANTY; without even the implied warranty of
* MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
* GNU General Public License for more details.
*
* You should have received a copy of the GNU General Public License
* along with PYSEGVIZ. If not, see <http://www.gnu.org/licenses/>.
"""

from enum import Enum

import numpy as np
import ujson as json


class SerializableEnum(Enum):
    def __str__(self):
        return self.name

    def __repr__(self):
        return f"{self.__class__.__name__}.{self.name}"

    def to_json(self):
        # Serialize the full class name and enum name
        return f"{self.__class__.__name__}.{self.name}"

    @classmethod
    def from_string(cls, name: str):
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(
                f"Invalid {cls.__name__}: {name}, valid values: {[e.name for e in cls]}"
            )


# Recursively convert enums, numpy scalars/arrays and tuples into plain json types
def to_serializable(obj):
    if isinstance(obj, SerializableEnum):
        return obj.to_json()
    if isinstance(obj, dict):
        return {str(k): to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_serializable(v) for v in obj]
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.generic):
        return obj.item()
    return obj


def dumps(obj, indent=4):
    return json.dumps(to_serializable(obj), indent=indent)


def loads(json_str):
    return json.loads(json_str)

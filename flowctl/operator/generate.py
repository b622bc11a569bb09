from dataclasses import dataclass
from numbers import Number
from typing import Tuple

from ..core.operator import Operator


@dataclass
class Constant(Operator):
    value: Number
    dtype: str

@dataclass
class Empty(Operator):
    shape: Tuple[int, ...]
    dtype: str

from dataclasses import dataclass
from typing import Tuple

from ..core.operator import Operator


@dataclass
class Index(Operator):
    axis: int
    index: int

@dataclass
class Split(Operator):
    axis: int
    sizes: Tuple[int, ...]

@dataclass
class Tie(Operator):
    axis: int

@dataclass
class Stack(Operator):
    axis: int

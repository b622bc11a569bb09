from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

ParamType = Literal[
    "tensor", "tensors", "number", "number[]", "bool", "string", "dtype", "shape", "dtype[]", "shape[]",
]


@dataclass
class InputParam:
    start: int
    # None reads one input, 0 reads through the last input
    end: Optional[int] = None
    type: ParamType = "tensor"


@dataclass
class AttrParam:
    value: Any
    type: ParamType = "string"


@dataclass
class Node:
    name: str
    op: str
    input_names: List[str] = field(default_factory=list)
    input_params: Dict[str, InputParam] = field(default_factory=dict)
    attr_params: Dict[str, AttrParam] = field(default_factory=dict)
    category: str = "control"

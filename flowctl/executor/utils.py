import numbers
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.errors import InvalidStateError
from ..core.tensor import Tensor
from .context import ExecutionContext
from .node import Node

ValueMap = Dict[str, List[Optional[Tensor]]]


def parse_node_name(name: str) -> Tuple[str, int]:
    """Split ``"node:k"`` into the node name and output index."""
    node_name, sep, index = name.rpartition(":")
    if sep and index.isdigit():
        return node_name, int(index)
    return name, 0


def get_node_name_with_context_id(name: str, context_id: str) -> str:
    return f"{name}-{context_id}" if context_id else name


def get_tensor(name: str, value_map: ValueMap, context: ExecutionContext) -> Optional[Tensor]:
    """Look up an edge's value, searching from the innermost frame outwards."""
    node_name, index = parse_node_name(name)
    for context_id in context.current_context_ids:
        outputs = value_map.get(get_node_name_with_context_id(node_name, context_id))
        if outputs:
            return outputs[index] if index < len(outputs) else None
    return None


def _to_python(tensor: Tensor) -> Any:
    return tensor.numpy().tolist()


def to_int(value: Any, what: str) -> int:
    """Coerce an index-like param to ``int``, rejecting non-integral numbers."""
    if not isinstance(value, bool) and isinstance(value, numbers.Real) and float(value).is_integer():
        return int(value)
    raise InvalidStateError(f"{what} must be an integer, got {value!r}")


def to_ints(values: Any, what: str) -> List[int]:
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise InvalidStateError(f"{what} must be a list of integers, got {values!r}")
    return [to_int(value, what) for value in values]


def get_param_value(param_name: str, node: Node, value_map: ValueMap, context: ExecutionContext) -> Any:
    input_param = node.input_params.get(param_name)
    if input_param is not None:
        start = input_param.start
        shifted_start = len(node.input_names) + start if start < 0 else start
        if input_param.type == "tensors":
            if input_param.end == 0:
                names = node.input_names[shifted_start:]
            elif input_param.end is None:
                names = node.input_names[shifted_start:shifted_start + 1]
            else:
                names = node.input_names[shifted_start:input_param.end]
            return [get_tensor(name, value_map, context) for name in names]
        tensor = get_tensor(node.input_names[shifted_start], value_map, context)
        if input_param.type == "tensor" or tensor is None:
            return tensor
        if input_param.type in ("number", "bool"):
            values = tensor.numpy().reshape(-1)
            if values.size == 0:
                raise InvalidStateError(f"{node.op} node {node.name!r}: {param_name!r} is an empty tensor")
            return values[0].item() if input_param.type == "number" else bool(values[0])
        return _to_python(tensor)
    attr_param = node.attr_params.get(param_name)
    return attr_param.value if attr_param is not None else None

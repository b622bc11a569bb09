from typing import Optional, Sequence, Tuple

from .errors import InvalidStateError


ImmediateShape = Tuple[int, ...]
# None, or -1/None dims, mean "any"
PartialShape = Optional[Tuple[Optional[int], ...]]


def to_partial_shape(shape: Optional[Sequence[Optional[int]]]) -> PartialShape:
    if shape is None:
        return None
    return tuple([None if dim is None or dim < 0 else int(dim) for dim in shape])


def is_fully_defined(shape: PartialShape) -> bool:
    return shape is not None and all(dim is not None for dim in shape)


def shapes_compatible(expected: PartialShape, actual: ImmediateShape) -> bool:
    if expected is None:
        return True
    if len(expected) != len(actual):
        return False
    return all(dim is None or dim == actual_dim for dim, actual_dim in zip(expected, actual))


def check_shape(expected: PartialShape, actual: ImmediateShape, what: str):
    if not shapes_compatible(expected, actual):
        raise InvalidStateError(f"{what}: expected shape {format_shape(expected)}, got {format_shape(actual)}")


def to_immediate_shape(shape: PartialShape) -> ImmediateShape:
    if shape is None:
        return ()
    return tuple([0 if dim is None else dim for dim in shape])


def format_shape(shape: PartialShape) -> str:
    if shape is None:
        return "<unknown>"
    return "[" + ",".join("?" if dim is None else str(dim) for dim in shape) + "]"

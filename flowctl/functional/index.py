from typing import Sequence, Tuple

from ..core.dispatch import dispatch
from ..core.errors import InvalidStateError
from ..core.tensor import Tensor
from ..operator.index import Index, Split, Stack, Tie


def index(x: Tensor, index: int, axis: int) -> Tensor:
    (z,) = dispatch(Index(axis=axis, index=index), x)
    return z


def split(x: Tensor, axis: int, sizes: Sequence[int]) -> Tuple[Tensor, ...]:
    sizes = tuple([int(size) for size in sizes])
    if any(size < 0 for size in sizes):
        raise InvalidStateError(f"split sizes must be non-negative, got {list(sizes)}")
    if sum(sizes) != x.shape[axis]:
        raise InvalidStateError(f"split sizes {list(sizes)} do not add up to dimension {x.shape[axis]}")
    return tuple(dispatch(Split(axis=axis, sizes=sizes), x))


def tie(xs: Sequence[Tensor], axis: int) -> Tensor:
    assert len(xs) > 0
    (z,) = dispatch(Tie(axis=axis), *xs)
    return z


def stack(xs: Sequence[Tensor], axis: int) -> Tensor:
    assert len(xs) > 0
    (z,) = dispatch(Stack(axis=axis), *xs)
    return z

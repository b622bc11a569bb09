from typing import Generic, Sequence, Tuple, TypeVar


_T = TypeVar("_T")


class Array(Generic[_T]):
    def index(self, index: int, axis: int) -> _T:
        from ..functional.index import index as index_get
        return index_get(self, index, axis)

    def split(self, axis: int, sizes: Sequence[int]) -> Tuple[_T, ...]:
        from ..functional.index import split
        return split(self, axis, sizes)

    def tie(self, others: Sequence[_T], axis: int) -> _T:
        from ..functional.index import tie
        return tie((self, *others), axis)

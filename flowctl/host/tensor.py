from numbers import Number
from typing import Tuple

import numpy

from ..core.dtype import dtype_info
from ..core.tensor import Tensor


class HostTensor(Tensor):
    __slots__ = [
        "_array",
    ]

    _array: numpy.ndarray

    def __init__(self, array: numpy.ndarray) -> None:
        super().__init__()
        dtype_info(array.dtype.name)
        self._array = array

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._array.shape)

    @property
    def dtype(self) -> str:
        return self._array.dtype.name

    @property
    def device(self) -> str:
        return "host"

    @staticmethod
    def from_numpy(array) -> "HostTensor":
        return HostTensor(numpy.array(array, copy=True))

    @staticmethod
    def from_item(item: Number, dtype: str) -> "HostTensor":
        return HostTensor(numpy.full((), item, dtype))

    def numpy(self) -> numpy.ndarray:
        return self._array.copy()

    def clone(self) -> "HostTensor":
        return HostTensor(self._array.copy())

    async def data(self):
        return self.numpy()

    def item(self):
        return dtype_info(self.dtype).python_type(self._array.item())

    def __repr__(self) -> str:
        return f"HostTensor({self._array!r})"

    def type(self):
        return HostTensor

from typing import Tuple

import numpy

from .object import Object
from .array import Array


class Tensor(Array["Tensor"], Object):
    @property
    def shape(self) -> Tuple[int, ...]:
        raise NotImplementedError()

    @property
    def dtype(self) -> str:
        raise NotImplementedError()

    @property
    def device(self) -> str:
        raise NotImplementedError()

    def clone(self) -> "Tensor":
        """Return an independently owned copy of this tensor."""
        raise NotImplementedError()

    async def data(self) -> numpy.ndarray:
        """Read the tensor back to the host.

        This is the point where a device backend may have to wait for pending
        work, so callers must await it.
        """
        raise NotImplementedError()

    def numpy(self) -> numpy.ndarray:
        raise NotImplementedError()

    def item(self):
        raise NotImplementedError()

    def type(self):
        return type(self)

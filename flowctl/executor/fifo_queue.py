import logging
from collections import deque
from typing import Deque, List, Optional, Sequence, Tuple

from ..core.dtype import check_dtype, dtype_info
from ..core.errors import InvalidStateError
from ..core.shape import PartialShape, check_shape, to_immediate_shape, to_partial_shape
from ..core.tensor import Tensor
from ..functional.generate import empty
from ..functional.index import stack

logger = logging.getLogger(__name__)


class FIFOQueue:
    """First-in first-out queue of tensor tuples with a fixed column schema.

    A capacity of zero or less means the queue is unbounded. Dequeueing never
    blocks: asking for more tuples than are queued returns what is there.
    """

    id: Optional[int]
    dtypes: Tuple[str, ...]
    shapes: Tuple[PartialShape, ...]
    capacity: int
    name: str
    container: str

    def __init__(
        self,
        dtypes: Sequence[str],
        shapes: Optional[Sequence[Optional[Sequence[Optional[int]]]]] = None,
        capacity: int = 0,
        name: str = "",
        container: str = "",
    ) -> None:
        for dtype in dtypes:
            dtype_info(dtype)
        if shapes is None or len(shapes) == 0:
            shapes = [None] * len(dtypes)
        if len(shapes) != len(dtypes):
            raise InvalidStateError(f"FIFOQueue {name}: got {len(shapes)} shapes for {len(dtypes)} dtypes")
        self.id = None
        self.dtypes = tuple(dtypes)
        self.shapes = tuple(to_partial_shape(shape) for shape in shapes)
        self.capacity = capacity
        self.name = name
        self.container = container
        self._tuples: Deque[Tuple[Tensor, ...]] = deque()

    def __repr__(self) -> str:
        return f"FIFOQueue(id={self.id}, name={self.name!r}, dtypes={list(self.dtypes)}, capacity={self.capacity})"

    @property
    def size(self) -> int:
        return len(self._tuples)

    @property
    def bounded(self) -> bool:
        return self.capacity > 0

    def enqueue(self, *tensors: Tensor):
        if len(tensors) != len(self.dtypes):
            raise InvalidStateError(f"FIFOQueue {self.name}: expected {len(self.dtypes)} components, got {len(tensors)}")
        if self.bounded and len(self._tuples) >= self.capacity:
            raise InvalidStateError(f"FIFOQueue {self.name} is full (capacity {self.capacity})")
        for column, (tensor, dtype, shape) in enumerate(zip(tensors, self.dtypes, self.shapes)):
            check_dtype(dtype, tensor.dtype, f"FIFOQueue {self.name} component {column}")
            check_shape(shape, tensor.shape, f"FIFOQueue {self.name} component {column}")
        self._tuples.append(tuple(tensor.clone() for tensor in tensors))

    def dequeue_up_to(self, num: int, dtypes: Optional[Sequence[str]] = None) -> List[Tensor]:
        """Pop up to ``num`` tuples and stack each column along a new axis 0."""
        if num < 0:
            raise InvalidStateError(f"FIFOQueue {self.name}: cannot dequeue {num} elements")
        if dtypes is not None and len(dtypes) > 0:
            if len(dtypes) != len(self.dtypes):
                raise InvalidStateError(f"FIFOQueue {self.name}: expected {len(self.dtypes)} dtypes, got {len(dtypes)}")
            for column, (expected, actual) in enumerate(zip(dtypes, self.dtypes)):
                check_dtype(expected, actual, f"FIFOQueue {self.name} component {column}")
        count = min(num, len(self._tuples))
        dequeued = [self._tuples.popleft() for _ in range(count)]
        logger.debug("dequeued %d of %d requested from %s", count, num, self)
        if count == 0:
            return [empty((0, *to_immediate_shape(shape)), dtype) for dtype, shape in zip(self.dtypes, self.shapes)]
        return [stack([item[column] for item in dequeued], axis=0) for column in range(len(self.dtypes))]

import logging
from typing import List, Optional, Sequence

from ..core.dtype import check_dtype, dtype_info
from ..core.errors import InvalidStateError
from ..core.shape import PartialShape, check_shape, format_shape, is_fully_defined, to_immediate_shape, to_partial_shape
from ..core.tensor import Tensor
from ..functional.generate import empty
from ..functional.index import stack, tie

logger = logging.getLogger(__name__)


class TensorArraySlot:
    __slots__ = [
        "tensor",
        "cleared",
    ]

    tensor: Optional[Tensor]
    cleared: bool

    def __init__(self) -> None:
        self.tensor = None
        self.cleared = False

    def store(self, tensor: Tensor):
        self.tensor = tensor
        self.cleared = False

    def release(self):
        self.tensor = None
        self.cleared = True


class TensorArray:
    """Index addressable store of tensors, written and read by graph ops.

    Slots start empty. With ``dynamic_size`` a write past the end grows the
    array, otherwise it is rejected. ``element_shape`` may contain unknown
    dimensions (``None`` or ``-1``) or be ``None`` altogether; when
    ``identical_element_shapes`` is set an unknown element shape is pinned by
    the first write and every later element has to match it exactly.
    """

    id: Optional[int]
    name: str
    dtype: str
    element_shape: PartialShape
    dynamic_size: bool
    clear_after_read: bool
    identical_element_shapes: bool
    closed: bool

    def __init__(
        self,
        name: str,
        dtype: str,
        size: int,
        element_shape: Optional[Sequence[Optional[int]]] = None,
        identical_element_shapes: bool = False,
        dynamic_size: bool = False,
        clear_after_read: bool = True,
    ) -> None:
        dtype_info(dtype)
        if size < 0:
            raise InvalidStateError(f"TensorArray {name}: size must be non-negative, got {size}")
        self.id = None
        self.name = name
        self.dtype = dtype
        self.element_shape = to_partial_shape(element_shape)
        self.identical_element_shapes = identical_element_shapes
        self.dynamic_size = dynamic_size
        self.clear_after_read = clear_after_read
        self.closed = False
        self._slots: List[TensorArraySlot] = [TensorArraySlot() for _ in range(size)]

    def __repr__(self) -> str:
        return (
            f"TensorArray(id={self.id}, name={self.name!r}, dtype={self.dtype}, size={len(self._slots)}, "
            f"element_shape={format_shape(self.element_shape)}, dynamic_size={self.dynamic_size})"
        )

    def _check_open(self):
        if self.closed:
            raise InvalidStateError(f"TensorArray {self.name} has already been closed")

    def _check_index(self, index: int, writing: bool):
        if index < 0:
            raise InvalidStateError(f"TensorArray {self.name}: index {index} must be non-negative")
        if index < len(self._slots):
            return
        if not writing:
            raise InvalidStateError(f"TensorArray {self.name}: tried to read from index {index}, but array size is {len(self._slots)}")
        if not self.dynamic_size:
            raise InvalidStateError(
                f"TensorArray {self.name}: tried to write to index {index}, but array is not resizeable and size is {len(self._slots)}"
            )
        self._slots.extend(TensorArraySlot() for _ in range(index + 1 - len(self._slots)))

    def size(self) -> int:
        self._check_open()
        return len(self._slots)

    def read(self, index: int) -> Tensor:
        self._check_open()
        self._check_index(index, writing=False)
        slot = self._slots[index]
        if slot.cleared:
            raise InvalidStateError(
                f"TensorArray {self.name}: could not read index {index} twice because it was cleared after a previous read "
                f"(perhaps try setting clear_after_read = false?)"
            )
        if slot.tensor is None:
            raise InvalidStateError(f"TensorArray {self.name}: could not read from index {index} because it has not been written")
        tensor = slot.tensor.clone()
        if self.clear_after_read:
            slot.release()
        return tensor

    def read_many(self, indices: Sequence[int]) -> List[Tensor]:
        return [self.read(index) for index in indices]

    def write(self, index: int, tensor: Tensor):
        self._check_open()
        check_dtype(self.dtype, tensor.dtype, f"TensorArray {self.name} write")
        check_shape(self.element_shape, tensor.shape, f"TensorArray {self.name} write at index {index}")
        self._check_index(index, writing=True)
        if self.identical_element_shapes and not is_fully_defined(self.element_shape):
            self.element_shape = to_partial_shape(tensor.shape)
        self._slots[index].store(tensor.clone())

    def write_many(self, indices: Sequence[int], tensors: Sequence[Tensor]):
        if len(indices) != len(tensors):
            raise InvalidStateError(
                f"TensorArray {self.name}: got {len(indices)} indices for {len(tensors)} tensors"
            )
        for index, tensor in zip(indices, tensors):
            self.write(index, tensor)

    def _empty_shape(self, leading: int, drop_leading: bool):
        shape = to_immediate_shape(self.element_shape)
        if drop_leading:
            shape = shape[1:]
        return (leading, *shape)

    def gather(self, indices: Sequence[int], dtype: Optional[str] = None) -> Tensor:
        """Stack the elements at ``indices`` along a new leading axis."""
        self._check_open()
        check_dtype(dtype, self.dtype, f"TensorArray {self.name} gather")
        if len(indices) == 0:
            return empty(self._empty_shape(0, drop_leading=False), self.dtype)
        return stack(self.read_many(indices), axis=0)

    def scatter(self, indices: Sequence[int], tensor: Tensor):
        """Write row ``k`` of ``tensor`` to slot ``indices[k]``."""
        self._check_open()
        check_dtype(self.dtype, tensor.dtype, f"TensorArray {self.name} scatter")
        if len(tensor.shape) == 0 or tensor.shape[0] != len(indices):
            raise InvalidStateError(
                f"TensorArray {self.name}: expected a tensor with {len(indices)} rows to scatter, got shape {format_shape(tensor.shape)}"
            )
        if len(indices) == 0:
            return
        max_index = max(indices)
        if not self.dynamic_size and max_index >= len(self._slots):
            raise InvalidStateError(f"TensorArray {self.name}: max index {max_index} must be < array size {len(self._slots)}")
        rows = [tensor.index(k, 0) for k in range(len(indices))]
        self.write_many(indices, rows)

    def concat(self, dtype: Optional[str] = None) -> Tensor:
        """Concatenate every written slot, in index order, along axis 0."""
        self._check_open()
        check_dtype(dtype, self.dtype, f"TensorArray {self.name} concat")
        indices = [index for index, slot in enumerate(self._slots) if slot.tensor is not None]
        if len(indices) == 0:
            return empty(self._empty_shape(0, drop_leading=True), self.dtype)
        tensors = self.read_many(indices)
        for tensor in tensors:
            if len(tensor.shape) == 0:
                raise InvalidStateError(f"TensorArray {self.name}: cannot concat scalar elements")
        return tie(tensors, axis=0)

    def split(self, lengths: Sequence[int], tensor: Tensor):
        """Write consecutive chunks of ``tensor`` to slots 0, 1, ..."""
        self._check_open()
        check_dtype(self.dtype, tensor.dtype, f"TensorArray {self.name} split")
        if len(tensor.shape) == 0:
            raise InvalidStateError(f"TensorArray {self.name}: cannot split a scalar")
        lengths = [int(length) for length in lengths]
        if sum(lengths) != tensor.shape[0]:
            raise InvalidStateError(
                f"TensorArray {self.name}: expected sum of lengths to be equal to tensor.shape[0], "
                f"but sum of lengths is {sum(lengths)}, and tensor's shape is {format_shape(tensor.shape)}"
            )
        if not self.dynamic_size and len(lengths) > len(self._slots):
            raise InvalidStateError(
                f"TensorArray {self.name}: got {len(lengths)} chunks for an array of size {len(self._slots)}"
            )
        chunks = tensor.split(0, lengths)
        self.write_many(list(range(len(lengths))), chunks)

    def clear_and_close(self):
        for slot in self._slots:
            slot.release()
        self._slots = []
        self.closed = True
        logger.debug("closed TensorArray %s", self.name)

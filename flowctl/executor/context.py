import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence, Tuple

from ..core.errors import InvalidStateError
from .fifo_queue import FIFOQueue
from .tensor_array import TensorArray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameInfo:
    id: int
    frame_name: str
    iteration_id: int


ROOT_FRAME = FrameInfo(0, "", 0)


def context_id_for_frames(frames: Sequence[FrameInfo]) -> str:
    return "/".join(
        "" if (frame.id == 0 and frame.iteration_id == 0) else f"{frame.frame_name}-{frame.iteration_id}"
        for frame in frames
    )


class ExecutionContext:
    """Frame stack and stateful collections for one graph run.

    ``current_context_ids`` lists the value map key suffixes visible from the
    innermost frame outwards; the root frame's suffix is the empty string.
    """

    _frames: Tuple[FrameInfo, ...]
    _current_context_ids: List[str]
    _last_id: int
    _tensor_arrays: Dict[int, TensorArray]
    _fifo_queues: Dict[int, FIFOQueue]

    def __init__(self) -> None:
        self._frames = (ROOT_FRAME,)
        self._last_id = 0
        self._current_context_ids = [""]
        self._tensor_arrays = {}
        self._fifo_queues = {}

    @property
    def current_context(self) -> Tuple[FrameInfo, ...]:
        return self._frames

    @current_context.setter
    def current_context(self, frames: Sequence[FrameInfo]):
        frames = tuple(frames)
        if len(frames) == 0 or frames[0] != ROOT_FRAME:
            raise InvalidStateError("frame stack must start with the root frame")
        if frames != self._frames:
            self._frames = frames
            self._current_context_ids = self._generate_context_ids()

    @property
    def current_context_id(self) -> str:
        return self._current_context_ids[0]

    @property
    def current_context_ids(self) -> List[str]:
        return list(self._current_context_ids)

    @property
    def depth(self) -> int:
        return len(self._frames) - 1

    @property
    def current_frame(self) -> FrameInfo:
        return self._frames[-1]

    def _generate_context_ids(self) -> List[str]:
        return [context_id_for_frames(self._frames[:len(self._frames) - i]) for i in range(len(self._frames))]

    def enter_frame(self, frame_name: str):
        self._last_id += 1
        self._frames = self._frames + (FrameInfo(self._last_id, frame_name, 0),)
        self._current_context_ids.insert(0, context_id_for_frames(self._frames))
        logger.debug("enter frame %r (depth %d)", frame_name, self.depth)

    def exit_frame(self):
        if len(self._frames) <= 1:
            raise InvalidStateError("Cannot exit frame, the context is empty")
        frame = self._frames[-1]
        self._frames = self._frames[:-1]
        self._current_context_ids.pop(0)
        logger.debug("exit frame %r (depth %d)", frame.frame_name, self.depth)

    def next_iteration(self):
        if len(self._frames) <= 1:
            raise InvalidStateError("Cannot increase frame iteration, the context is empty")
        self._last_id += 1
        frame = replace(self._frames[-1], id=self._last_id, iteration_id=self._frames[-1].iteration_id + 1)
        self._frames = self._frames[:-1] + (frame,)
        self._current_context_ids[0] = context_id_for_frames(self._frames)

    def add_tensor_array(self, tensor_array: TensorArray) -> int:
        assert tensor_array.id is None, "tensor array is already registered"
        tensor_array.id = len(self._tensor_arrays)
        self._tensor_arrays[tensor_array.id] = tensor_array
        logger.debug("registered %s", tensor_array)
        return tensor_array.id

    def get_tensor_array(self, tensor_array_id: int) -> TensorArray:
        try:
            return self._tensor_arrays[tensor_array_id]
        except KeyError:
            raise InvalidStateError(f"TensorArray {tensor_array_id} does not exist") from None

    def add_fifo_queue(self, fifo_queue: FIFOQueue) -> int:
        assert fifo_queue.id is None, "queue is already registered"
        fifo_queue.id = len(self._fifo_queues)
        self._fifo_queues[fifo_queue.id] = fifo_queue
        logger.debug("registered %s", fifo_queue)
        return fifo_queue.id

    def get_fifo_queue(self, queue_id: int) -> FIFOQueue:
        try:
            return self._fifo_queues[queue_id]
        except KeyError:
            raise InvalidStateError(f"FIFOQueue {queue_id} does not exist") from None

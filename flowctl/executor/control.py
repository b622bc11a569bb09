import logging
from typing import Awaitable, Callable, Dict, List, Optional

import nvtx

from .. import host as _host  # noqa: F401  registers the default backend
from ..core.errors import InvalidStateError, UnsupportedOperationError
from ..core.tensor import Tensor
from ..functional.generate import flag, index_scalar
from ..operator.control_flow import ControlOp
from .context import ExecutionContext
from .fifo_queue import FIFOQueue
from .node import Node
from .tensor_array import TensorArray
from .utils import ValueMap, get_param_value, get_tensor, to_int, to_ints

logger = logging.getLogger(__name__)

CATEGORY = "control"

# None marks an output slot that carries no value on this visit
Outputs = List[Optional[Tensor]]
OpHandler = Callable[[Node, ValueMap, ExecutionContext], Awaitable[Optional[Outputs]]]

OP_HANDLERS: Dict[ControlOp, OpHandler] = {}


def register_op(op: ControlOp):
    def decorator(handler: OpHandler):
        OP_HANDLERS[op] = handler
        return handler
    return decorator


def _tensor_param(name: str, node: Node, value_map: ValueMap, context: ExecutionContext) -> Tensor:
    tensor = get_param_value(name, node, value_map, context)
    if tensor is None:
        raise InvalidStateError(f"{node.op} node {node.name!r} has no value for {name!r}")
    return tensor


def _bool_param(name: str, node: Node, value_map: ValueMap, context: ExecutionContext, default: bool) -> bool:
    value = get_param_value(name, node, value_map, context)
    return default if value is None else bool(value)


def _int_param(
    name: str, node: Node, value_map: ValueMap, context: ExecutionContext, default: Optional[int] = None
) -> int:
    value = get_param_value(name, node, value_map, context)
    if value is None:
        if default is None:
            raise InvalidStateError(f"{node.op} node {node.name!r} has no value for {name!r}")
        return default
    return to_int(value, f"{node.op} node {node.name!r} param {name!r}")


def _ints_param(name: str, node: Node, value_map: ValueMap, context: ExecutionContext) -> List[int]:
    values = get_param_value(name, node, value_map, context)
    if values is None:
        raise InvalidStateError(f"{node.op} node {node.name!r} has no value for {name!r}")
    return to_ints(values, f"{node.op} node {node.name!r} param {name!r}")


def _tensor_array_param(node: Node, value_map: ValueMap, context: ExecutionContext) -> TensorArray:
    return context.get_tensor_array(_int_param("tensorArrayId", node, value_map, context))


async def execute_op(node: Node, value_map: ValueMap, context: ExecutionContext) -> Optional[Outputs]:
    """Run one visit of a control-flow node.

    Returns one entry per output slot, or ``None`` from ``merge`` when none of
    its inputs has been produced yet and the node has to be visited again.
    """
    try:
        handler = OP_HANDLERS[ControlOp(node.op)]
    except ValueError:
        raise UnsupportedOperationError(node.op) from None
    with nvtx.annotate(f"control/{node.op}", domain="flowctl"):
        return await handler(node, value_map, context)


@register_op(ControlOp.LOOP_COND)
async def _loop_cond(node: Node, value_map: ValueMap, context: ExecutionContext):
    return [_tensor_param("pred", node, value_map, context).clone()]


@register_op(ControlOp.SWITCH)
async def _switch(node: Node, value_map: ValueMap, context: ExecutionContext):
    pred = _tensor_param("pred", node, value_map, context)
    data = _tensor_param("data", node, value_map, context)
    # outputs :0 => false, :1 => true; an empty predicate counts as false
    values = (await pred.data()).reshape(-1)
    if values.size > 0 and values[0]:
        return [None, data.clone()]
    return [data.clone(), None]


@register_op(ControlOp.MERGE)
async def _merge(node: Node, value_map: ValueMap, context: ExecutionContext):
    for name in node.input_names:
        tensor = get_tensor(name, value_map, context)
        if tensor is not None:
            return [tensor.clone()]
    logger.debug("merge %r has no ready input", node.name)
    return None


@register_op(ControlOp.ENTER)
async def _enter(node: Node, value_map: ValueMap, context: ExecutionContext):
    frame_name = get_param_value("frameName", node, value_map, context)
    data = _tensor_param("tensor", node, value_map, context)
    context.enter_frame(frame_name)
    return [data.clone()]


@register_op(ControlOp.EXIT)
async def _exit(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor = _tensor_param("tensor", node, value_map, context)
    context.exit_frame()
    return [tensor.clone()]


@register_op(ControlOp.NEXT_ITERATION)
async def _next_iteration(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor = _tensor_param("tensor", node, value_map, context)
    context.next_iteration()
    return [tensor.clone()]


@register_op(ControlOp.TENSOR_ARRAY)
async def _tensor_array(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = TensorArray(
        name=get_param_value("name", node, value_map, context) or node.name,
        dtype=get_param_value("dtype", node, value_map, context),
        size=_int_param("size", node, value_map, context, default=0),
        element_shape=get_param_value("elementShape", node, value_map, context),
        identical_element_shapes=_bool_param("identicalElementShapes", node, value_map, context, False),
        dynamic_size=_bool_param("dynamicSize", node, value_map, context, False),
        clear_after_read=_bool_param("clearAfterRead", node, value_map, context, True),
    )
    tensor_array_id = context.add_tensor_array(tensor_array)
    return [index_scalar(tensor_array_id), flag()]


@register_op(ControlOp.TENSOR_ARRAY_WRITE)
async def _tensor_array_write(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    index = _int_param("index", node, value_map, context)
    tensor_array.write(index, _tensor_param("tensor", node, value_map, context))
    return [flag()]


@register_op(ControlOp.TENSOR_ARRAY_READ)
async def _tensor_array_read(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    return [tensor_array.read(_int_param("index", node, value_map, context))]


@register_op(ControlOp.TENSOR_ARRAY_GATHER)
async def _tensor_array_gather(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    indices = _ints_param("indices", node, value_map, context)
    dtype = get_param_value("dtype", node, value_map, context)
    return [tensor_array.gather(indices, dtype)]


@register_op(ControlOp.TENSOR_ARRAY_SCATTER)
async def _tensor_array_scatter(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    indices = _ints_param("indices", node, value_map, context)
    tensor_array.scatter(indices, _tensor_param("tensor", node, value_map, context))
    return [flag()]


@register_op(ControlOp.TENSOR_ARRAY_CONCAT)
async def _tensor_array_concat(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    return [tensor_array.concat(get_param_value("dtype", node, value_map, context))]


@register_op(ControlOp.TENSOR_ARRAY_SPLIT)
async def _tensor_array_split(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    lengths = _ints_param("lengths", node, value_map, context)
    tensor_array.split(lengths, _tensor_param("tensor", node, value_map, context))
    return [flag()]


@register_op(ControlOp.TENSOR_ARRAY_SIZE)
async def _tensor_array_size(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    return [index_scalar(tensor_array.size(), "int32")]


@register_op(ControlOp.TENSOR_ARRAY_CLOSE)
async def _tensor_array_close(node: Node, value_map: ValueMap, context: ExecutionContext):
    tensor_array = _tensor_array_param(node, value_map, context)
    tensor_array.clear_and_close()
    return []


@register_op(ControlOp.FIFO_QUEUE)
async def _fifo_queue(node: Node, value_map: ValueMap, context: ExecutionContext):
    fifo_queue = FIFOQueue(
        dtypes=get_param_value("dtypes", node, value_map, context),
        shapes=get_param_value("shapes", node, value_map, context),
        capacity=_int_param("capacity", node, value_map, context, default=0),
        name=get_param_value("name", node, value_map, context) or node.name,
        container=get_param_value("container", node, value_map, context) or "",
    )
    queue_id = context.add_fifo_queue(fifo_queue)
    return [index_scalar(queue_id), flag()]


@register_op(ControlOp.QUEUE_DEQUEUE_UP_TO)
async def _queue_dequeue_up_to(node: Node, value_map: ValueMap, context: ExecutionContext):
    fifo_queue = context.get_fifo_queue(_int_param("fifoQueueId", node, value_map, context))
    num = _int_param("num", node, value_map, context)
    dtypes = get_param_value("dtypes", node, value_map, context)
    return fifo_queue.dequeue_up_to(num, dtypes)

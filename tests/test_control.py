"""Tests for the control-flow op dispatcher."""

import numpy
import pytest

from flowctl.core.errors import InvalidStateError, UnsupportedOperationError
from flowctl.executor.context import ExecutionContext
from flowctl.executor.control import CATEGORY, execute_op
from flowctl.executor.node import InputParam

from conftest import make_node, tensor


def _first(type: str = "tensor") -> InputParam:
    return InputParam(start=0, type=type)


def _ta_node(op: str, input_names, inputs=(), **attrs):
    params = {"tensorArrayId": InputParam(0, type="number")}
    for offset, (name, type) in enumerate(inputs, start=1):
        params[name] = InputParam(offset, type=type)
    return make_node(op, input_names=input_names, inputs=params, attrs=attrs)


async def _create_tensor_array(context, value_map, size=4, size_dtype="int32", **attrs) -> None:
    attrs.setdefault("dtype", "float32")
    attrs.setdefault("clearAfterRead", False)
    node = make_node(
        "tensorArray", name="ta", input_names=["size"], inputs={"size": InputParam(0, type="number")}, attrs=attrs
    )
    value_map["size"] = [tensor(size, size_dtype)]
    value_map["ta"] = await execute_op(node, value_map, context)


def test_category_is_control() -> None:
    assert CATEGORY == "control"


@pytest.mark.asyncio
async def test_unknown_op_is_unsupported(context: ExecutionContext) -> None:
    with pytest.raises(UnsupportedOperationError, match="Node type matMul is not implemented"):
        await execute_op(make_node("matMul"), {}, context)


@pytest.mark.asyncio
async def test_loop_cond_copies_predicate(context: ExecutionContext) -> None:
    pred = tensor(True, "bool")
    node = make_node("loopCond", input_names=["pred"], inputs={"pred": _first()})
    (result,) = await execute_op(node, {"pred": [pred]}, context)
    assert result.item() is True
    assert result is not pred


@pytest.mark.asyncio
@pytest.mark.parametrize("flag, expected_slot", [(True, 1), (False, 0)])
async def test_switch_routes_data(context: ExecutionContext, flag: bool, expected_slot: int) -> None:
    data = tensor([1.0, 2.0])
    node = make_node(
        "switch",
        input_names=["data", "pred"],
        inputs={"data": InputParam(0), "pred": InputParam(1)},
    )
    outputs = await execute_op(node, {"data": [data], "pred": [tensor(flag, "bool")]}, context)
    assert len(outputs) == 2
    assert outputs[1 - expected_slot] is None
    routed = outputs[expected_slot]
    assert routed.numpy().tolist() == [1.0, 2.0]
    routed._array[0] = 9.0
    assert data.numpy().tolist() == [1.0, 2.0]


@pytest.mark.asyncio
async def test_merge_takes_first_defined_input(context: ExecutionContext) -> None:
    node = make_node("merge", input_names=["a", "b"])
    d1, d2 = tensor([1.0]), tensor([2.0])

    (result,) = await execute_op(node, {"a": [None], "b": [d2]}, context)
    assert result.numpy().tolist() == [2.0]
    assert result is not d2

    (result,) = await execute_op(node, {"a": [d1], "b": [d2]}, context)
    assert result.numpy().tolist() == [1.0]


@pytest.mark.asyncio
async def test_merge_without_inputs_is_not_ready(context: ExecutionContext) -> None:
    node = make_node("merge", input_names=["a", "b:1"])
    assert await execute_op(node, {"a": [None], "b": [tensor(1.0), None]}, context) is None
    assert await execute_op(node, {}, context) is None


@pytest.mark.asyncio
async def test_enter_exit_restores_depth(context: ExecutionContext) -> None:
    enter = make_node("enter", input_names=["x"], inputs={"tensor": _first()}, attrs={"frameName": "while"})
    exit = make_node("exit", input_names=["y"], inputs={"tensor": _first()})
    (entered,) = await execute_op(enter, {"x": [tensor(1.0)]}, context)
    assert context.depth == 1
    assert context.current_frame.frame_name == "while"
    (exited,) = await execute_op(exit, {"y": [tensor(2.0)]}, context)
    assert context.depth == 0
    assert entered.item() == 1.0
    assert exited.item() == 2.0


@pytest.mark.asyncio
async def test_exit_without_frame_fails(context: ExecutionContext) -> None:
    exit = make_node("exit", input_names=["y"], inputs={"tensor": _first()})
    with pytest.raises(InvalidStateError):
        await execute_op(exit, {"y": [tensor(2.0)]}, context)


@pytest.mark.asyncio
async def test_missing_tensor_input_fails(context: ExecutionContext) -> None:
    node = make_node("loopCond", input_names=["pred"], inputs={"pred": _first()})
    with pytest.raises(InvalidStateError, match="no value for 'pred'"):
        await execute_op(node, {}, context)


@pytest.mark.asyncio
async def test_next_iteration_resolves_values_per_iteration(context: ExecutionContext) -> None:
    context.enter_frame("loop")
    node = make_node("nextIteration", input_names=["body"], inputs={"tensor": _first()})
    value_map = {"body-/loop-0": [tensor(0.0)]}
    (result,) = await execute_op(node, value_map, context)
    assert result.item() == 0.0
    assert context.current_context_id == "/loop-1"
    with pytest.raises(InvalidStateError):
        await execute_op(node, value_map, context)


@pytest.mark.asyncio
async def test_tensor_array_lifecycle(context: ExecutionContext) -> None:
    value_map = {}
    await _create_tensor_array(context, value_map, size=4, name="acc")
    handle, created = value_map["ta"]
    assert handle.dtype == "int32"
    assert handle.item() == 0
    assert created.item() == 1.0
    assert context.get_tensor_array(0).name == "acc"

    value_map["index"] = [tensor(3, "int32")]
    value_map["value"] = [tensor([5.0, 6.0])]
    write = _ta_node(
        "tensorArrayWrite", ["ta", "index", "value"], inputs=[("index", "number"), ("tensor", "tensor")]
    )
    (written,) = await execute_op(write, value_map, context)
    assert written.item() == 1.0

    read = _ta_node("tensorArrayRead", ["ta", "index"], inputs=[("index", "number")])
    (result,) = await execute_op(read, value_map, context)
    assert result.numpy().tolist() == [5.0, 6.0]

    size = _ta_node("tensorArraySize", ["ta"])
    (result,) = await execute_op(size, value_map, context)
    assert result.dtype == "int32"
    assert result.item() == 4

    close = _ta_node("tensorArrayClose", ["ta"])
    assert await execute_op(close, value_map, context) == []
    with pytest.raises(InvalidStateError, match="closed"):
        await execute_op(read, value_map, context)
    with pytest.raises(InvalidStateError, match="closed"):
        await execute_op(write, value_map, context)


@pytest.mark.asyncio
async def test_tensor_array_read_of_untouched_index_fails(context: ExecutionContext) -> None:
    value_map = {"index": [tensor(1, "int32")]}
    await _create_tensor_array(context, value_map)
    read = _ta_node("tensorArrayRead", ["ta", "index"], inputs=[("index", "number")])
    with pytest.raises(InvalidStateError):
        await execute_op(read, value_map, context)


@pytest.mark.asyncio
async def test_tensor_array_scatter_gather(context: ExecutionContext) -> None:
    value_map = {}
    await _create_tensor_array(context, value_map, size=3)
    rows = numpy.arange(6, dtype="float32").reshape(3, 2)
    value_map["scatter_indices"] = [tensor([2, 0, 1], "int32")]
    value_map["gather_indices"] = [tensor([0, 1, 2], "int32")]
    value_map["rows"] = [tensor(rows)]
    scatter = _ta_node(
        "tensorArrayScatter",
        ["ta", "scatter_indices", "rows"],
        inputs=[("indices", "number[]"), ("tensor", "tensor")],
    )
    gather = _ta_node("tensorArrayGather", ["ta", "gather_indices"], inputs=[("indices", "number[]")], dtype="float32")
    (flag,) = await execute_op(scatter, value_map, context)
    assert flag.item() == 1.0
    (gathered,) = await execute_op(gather, value_map, context)
    assert numpy.array_equal(gathered.numpy(), rows[[1, 2, 0]])


@pytest.mark.asyncio
async def test_tensor_array_split_concat(context: ExecutionContext) -> None:
    value_map = {}
    await _create_tensor_array(context, value_map, size=2)
    source = numpy.arange(10, dtype="float32").reshape(5, 2)
    value_map["lengths"] = [tensor([2, 3], "int32")]
    value_map["source"] = [tensor(source)]
    split = _ta_node("tensorArraySplit", ["ta", "lengths", "source"], inputs=[("lengths", "number[]"), ("tensor", "tensor")])
    concat = _ta_node("tensorArrayConcat", ["ta"], dtype="float32")
    await execute_op(split, value_map, context)
    (result,) = await execute_op(concat, value_map, context)
    assert numpy.array_equal(result.numpy(), source)


@pytest.mark.asyncio
async def test_tensor_array_out_of_range_without_dynamic_size(context: ExecutionContext) -> None:
    value_map = {"index": [tensor(4, "int32")], "value": [tensor(1.0)]}
    await _create_tensor_array(context, value_map, size=4)
    write = _ta_node(
        "tensorArrayWrite", ["ta", "index", "value"], inputs=[("index", "number"), ("tensor", "tensor")]
    )
    with pytest.raises(InvalidStateError):
        await execute_op(write, value_map, context)


@pytest.mark.asyncio
async def test_fifo_queue_dequeue_up_to(context: ExecutionContext) -> None:
    create = make_node(
        "fifoQueue",
        name="queue",
        attrs={"dtypes": ["float32"], "shapes": [[2]], "capacity": 0, "container": "", "name": "q"},
    )
    value_map = {"queue": await execute_op(create, {}, context)}
    handle, created = value_map["queue"]
    assert handle.item() == 0
    assert created.item() == 1.0

    queue = context.get_fifo_queue(0)
    for i in range(3):
        queue.enqueue(tensor([i, i]))

    dequeue = make_node(
        "queueDequeueUpTo",
        input_names=["queue", "num"],
        inputs={"fifoQueueId": InputParam(0, type="number"), "num": InputParam(1, type="number")},
        attrs={"dtypes": ["float32"]},
    )
    value_map["num"] = [tensor(5, "int32")]
    outputs = await execute_op(dequeue, value_map, context)
    assert len(outputs) == 1
    assert outputs[0].numpy().tolist() == [[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]]
    assert queue.size == 0


@pytest.mark.asyncio
async def test_queue_ops_reject_unknown_id(context: ExecutionContext) -> None:
    dequeue = make_node(
        "queueDequeueUpTo",
        input_names=["queue"],
        inputs={"fifoQueueId": InputParam(0, type="number")},
        attrs={"num": 1},
    )
    with pytest.raises(InvalidStateError):
        await execute_op(dequeue, {"queue": [tensor(3, "int32")]}, context)


@pytest.mark.asyncio
async def test_switch_with_empty_predicate_takes_false_branch(context: ExecutionContext) -> None:
    node = make_node(
        "switch",
        input_names=["data", "pred"],
        inputs={"data": InputParam(0), "pred": InputParam(1)},
    )
    value_map = {"data": [tensor([1.0])], "pred": [tensor([], "bool")]}
    false_branch, true_branch = await execute_op(node, value_map, context)
    assert true_branch is None
    assert false_branch.numpy().tolist() == [1.0]


@pytest.mark.asyncio
async def test_tensor_array_accepts_integral_float_params(context: ExecutionContext) -> None:
    value_map = {"index": [tensor(3.0)], "value": [tensor([5.0, 6.0])]}
    await _create_tensor_array(context, value_map, size=4.0, size_dtype="float32")
    assert context.get_tensor_array(0).size() == 4
    write = _ta_node(
        "tensorArrayWrite", ["ta", "index", "value"], inputs=[("index", "number"), ("tensor", "tensor")]
    )
    read = _ta_node("tensorArrayRead", ["ta", "index"], inputs=[("index", "number")])
    await execute_op(write, value_map, context)
    (result,) = await execute_op(read, value_map, context)
    assert result.numpy().tolist() == [5.0, 6.0]

    value_map["indices"] = [tensor([1.0, 0.0])]
    value_map["rows"] = [tensor([[1.0, 1.0], [0.0, 0.0]])]
    scatter = _ta_node(
        "tensorArrayScatter", ["ta", "indices", "rows"], inputs=[("indices", "number[]"), ("tensor", "tensor")]
    )
    gather = _ta_node("tensorArrayGather", ["ta", "indices"], inputs=[("indices", "number[]")], dtype="float32")
    await execute_op(scatter, value_map, context)
    (gathered,) = await execute_op(gather, value_map, context)
    assert gathered.numpy().tolist() == [[1.0, 1.0], [0.0, 0.0]]


@pytest.mark.asyncio
@pytest.mark.parametrize("op, inputs, values", [
    ("tensorArrayWrite", [("index", "number"), ("tensor", "tensor")], [tensor(1.5), tensor([1.0])]),
    ("tensorArrayRead", [("index", "number")], [tensor(0.5)]),
    ("tensorArrayGather", [("indices", "number[]")], [tensor([0.0, 1.25])]),
    ("tensorArrayGather", [("indices", "number[]")], [tensor(1, "int32")]),
])
async def test_tensor_array_rejects_non_integral_params(context: ExecutionContext, op, inputs, values) -> None:
    value_map = {}
    await _create_tensor_array(context, value_map, size=2)
    names = [f"in{k}" for k in range(len(values))]
    value_map.update({name: [value] for name, value in zip(names, values)})
    node = _ta_node(op, ["ta", *names], inputs=inputs, dtype="float32")
    with pytest.raises(InvalidStateError, match="integer"):
        await execute_op(node, value_map, context)


@pytest.mark.asyncio
async def test_tensor_array_size_must_be_integral(context: ExecutionContext) -> None:
    with pytest.raises(InvalidStateError, match="integer"):
        await _create_tensor_array(context, {}, size=2.5, size_dtype="float32")


@pytest.mark.asyncio
async def test_queue_dequeue_with_float_num(context: ExecutionContext) -> None:
    create = make_node("fifoQueue", name="queue", attrs={"dtypes": ["float32"], "shapes": [[]]})
    value_map = {"queue": await execute_op(create, {}, context)}
    queue = context.get_fifo_queue(0)
    for i in range(3):
        queue.enqueue(tensor(float(i)))
    dequeue = make_node(
        "queueDequeueUpTo",
        input_names=["queue", "num"],
        inputs={"fifoQueueId": InputParam(0, type="number"), "num": InputParam(1, type="number")},
    )
    value_map["num"] = [tensor(2.0)]
    (column,) = await execute_op(dequeue, value_map, context)
    assert column.numpy().tolist() == [0.0, 1.0]
    assert queue.size == 1

    value_map["num"] = [tensor(0.5)]
    with pytest.raises(InvalidStateError, match="integer"):
        await execute_op(dequeue, value_map, context)
    assert queue.size == 1

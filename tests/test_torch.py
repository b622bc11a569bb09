"""The torch backend goes through the same dispatch table as the host one."""

import pytest

torch = pytest.importorskip("torch")

from flowctl.core.config import set_default_device
from flowctl.core.torch import TorchTensor
from flowctl.executor.context import ExecutionContext
from flowctl.executor.control import execute_op
from flowctl.executor.fifo_queue import FIFOQueue
from flowctl.executor.node import InputParam
from flowctl.executor.tensor_array import TensorArray

from conftest import make_node


def test_tensor_array_on_torch_tensors() -> None:
    ta = TensorArray("ta", "float32", 3, clear_after_read=False)
    ta.scatter([1, 0, 2], TorchTensor(torch.arange(6, dtype=torch.float32).reshape(3, 2)))
    gathered = ta.gather([0, 1, 2])
    assert isinstance(gathered, TorchTensor)
    assert gathered.value.tolist() == [[2.0, 3.0], [0.0, 1.0], [4.0, 5.0]]
    assert ta.concat().shape == (6,)


def test_empty_dequeue_uses_configured_device() -> None:
    set_default_device("torch")
    (column,) = FIFOQueue(["int64"], [[3]]).dequeue_up_to(2)
    assert isinstance(column, TorchTensor)
    assert column.shape == (0, 3)


@pytest.mark.asyncio
async def test_switch_reads_back_torch_predicate() -> None:
    node = make_node("switch", input_names=["data", "pred"], inputs={"data": InputParam(0), "pred": InputParam(1)})
    data = TorchTensor(torch.ones(2))
    value_map = {"data": [data], "pred": [TorchTensor(torch.tensor(False))]}
    false_branch, true_branch = await execute_op(node, value_map, ExecutionContext())
    assert true_branch is None
    assert isinstance(false_branch, TorchTensor)
    false_branch.value[0] = 5.0
    assert data.value.tolist() == [1.0, 1.0]

import asyncio
import logging
import sys

import numpy

from flowctl.executor.context import ExecutionContext
from flowctl.executor.control import execute_op
from flowctl.executor.node import AttrParam, InputParam, Node
from flowctl.executor.utils import get_node_name_with_context_id
from flowctl.host import HostTensor


# y = x * 2 if x > 0 else -x, encoded as switch -> branch ops -> merge
async def run(x: float):
    context = ExecutionContext()
    value_map = {
        "x": [HostTensor.from_numpy(numpy.array(x, dtype=numpy.float32))],
        "positive": [HostTensor.from_numpy(numpy.array(x > 0))],
    }

    def store(name, outputs):
        value_map[get_node_name_with_context_id(name, context.current_context_id)] = outputs

    switch = Node("switch", "switch", ["x", "positive"], {"data": InputParam(0), "pred": InputParam(1)})
    false_branch, true_branch = await execute_op(switch, value_map, context)
    store("switch", [false_branch, true_branch])
    if true_branch is not None:
        store("double", [HostTensor(true_branch.numpy() * 2)])
    if false_branch is not None:
        store("negate", [HostTensor(-false_branch.numpy())])

    merge = Node("merge", "merge", ["negate", "double"])
    (y,) = await execute_op(merge, value_map, context)

    queue = Node("queue", "fifoQueue", attr_params={"dtypes": AttrParam(["float32"]), "shapes": AttrParam([[]])})
    store("queue", await execute_op(queue, value_map, context))
    context.get_fifo_queue(0).enqueue(y)
    dequeue = Node(
        "dequeue", "queueDequeueUpTo", ["queue"], {"fifoQueueId": InputParam(0, type="number")},
        {"num": AttrParam(4, "number")},
    )
    (column,) = await execute_op(dequeue, value_map, context)
    return y, column


def main():
    logging.basicConfig(level=logging.DEBUG)
    for arg in sys.argv[1:] or ["3", "-1.5"]:
        y, column = asyncio.run(run(float(arg)))
        print(f"x={arg}\ty={y.item()}\tdequeued={column.numpy().tolist()}")


if __name__ == '__main__':
    main()

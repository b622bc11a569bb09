from enum import Enum


class ControlOp(str, Enum):
    LOOP_COND = "loopCond"
    SWITCH = "switch"
    MERGE = "merge"
    ENTER = "enter"
    EXIT = "exit"
    NEXT_ITERATION = "nextIteration"
    TENSOR_ARRAY = "tensorArray"
    TENSOR_ARRAY_WRITE = "tensorArrayWrite"
    TENSOR_ARRAY_READ = "tensorArrayRead"
    TENSOR_ARRAY_GATHER = "tensorArrayGather"
    TENSOR_ARRAY_SCATTER = "tensorArrayScatter"
    TENSOR_ARRAY_CONCAT = "tensorArrayConcat"
    TENSOR_ARRAY_SPLIT = "tensorArraySplit"
    TENSOR_ARRAY_SIZE = "tensorArraySize"
    TENSOR_ARRAY_CLOSE = "tensorArrayClose"
    FIFO_QUEUE = "fifoQueue"
    QUEUE_DEQUEUE_UP_TO = "queueDequeueUpTo"

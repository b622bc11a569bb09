from typing import Literal

import numpy

from ..core.device_operator import DeviceOperator
from ..core.dispatch import register_dispatch
from ..operator.generate import Constant, Empty
from ..operator.index import Index, Split, Stack, Tie
from .tensor import HostTensor


def _check_same_dtype(op_name: str, *args: HostTensor):
    for arg in args[1:]:
        assert arg.dtype == args[0].dtype, f"{op_name}: {arg.dtype} vs {args[0].dtype}"


@register_dispatch()
def dispatch_constant(op: DeviceOperator[Constant, Literal["host"]]):
    return (HostTensor.from_item(op.operator.value, op.operator.dtype),)


@register_dispatch()
def dispatch_empty(op: DeviceOperator[Empty, Literal["host"]]):
    return (HostTensor(numpy.zeros(op.operator.shape, op.operator.dtype)),)


@register_dispatch()
def dispatch_index(op: Index, x: HostTensor):
    z = numpy.take(x._array, op.index, axis=op.axis)
    return (HostTensor(numpy.array(z, copy=True)),)


@register_dispatch()
def dispatch_split(op: Split, x: HostTensor):
    if len(op.sizes) == 0:
        return ()
    offsets = numpy.cumsum(op.sizes)[:-1]
    return tuple(HostTensor(chunk.copy()) for chunk in numpy.split(x._array, offsets, axis=op.axis))


@register_dispatch()
def dispatch_tie(op: Tie, *args: HostTensor):
    _check_same_dtype("tie", *args)
    return (HostTensor(numpy.concatenate([arg._array for arg in args], axis=op.axis)),)


@register_dispatch()
def dispatch_stack(op: Stack, *args: HostTensor):
    _check_same_dtype("stack", *args)
    return (HostTensor(numpy.stack([arg._array for arg in args], axis=op.axis)),)

import asyncio
from typing import Literal, Tuple

import numpy
import torch

from .device_operator import DeviceOperator
from .dispatch import register_dispatch
from .dtype import dtype_info
from .tensor import Tensor
from ..operator.generate import Constant, Empty
from ..operator.index import Index, Split, Stack, Tie


class TorchTensor(Tensor):
    def __init__(self, value: torch.Tensor) -> None:
        super().__init__()
        self._value = value
        dtype_info(self.dtype)

    @property
    def value(self):
        return self._value

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(self._value.shape)

    @property
    def dtype(self) -> str:
        return str(self._value.dtype).split(".")[-1]

    @property
    def device(self):
        return "torch"

    def clone(self) -> "TorchTensor":
        return TorchTensor(self._value.detach().clone())

    def numpy(self) -> numpy.ndarray:
        return self._value.detach().cpu().numpy().copy()

    async def data(self):
        # waits for queued device work, keep it off the event loop
        return await asyncio.to_thread(self.numpy)

    def item(self):
        return dtype_info(self.dtype).python_type(self._value.item())

    def __repr__(self) -> str:
        return f"TorchTensor({self._value!r})"

    def type(self):
        return TorchTensor


@register_dispatch()
def dispatch_constant(op: DeviceOperator[Constant, Literal["torch"]]):
    value = torch.tensor(op.operator.value, dtype=getattr(torch, op.operator.dtype))
    return (TorchTensor(value),)


@register_dispatch()
def dispatch_empty(op: DeviceOperator[Empty, Literal["torch"]]):
    return (TorchTensor(torch.zeros(op.operator.shape, dtype=getattr(torch, op.operator.dtype))),)


@register_dispatch()
def dispatch_index(op: Index, x: TorchTensor):
    return (TorchTensor(x.value.select(op.axis, op.index).clone()),)


@register_dispatch()
def dispatch_split(op: Split, x: TorchTensor):
    if len(op.sizes) == 0:
        return ()
    chunks = torch.split(x.value, list(op.sizes), dim=op.axis)
    return tuple(TorchTensor(chunk.clone()) for chunk in chunks)


@register_dispatch()
def dispatch_tie(op: Tie, *args: TorchTensor):
    return (TorchTensor(torch.cat([arg.value for arg in args], dim=op.axis)),)


@register_dispatch()
def dispatch_stack(op: Stack, *args: TorchTensor):
    return (TorchTensor(torch.stack([arg.value for arg in args], dim=op.axis)),)

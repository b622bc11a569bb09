from numbers import Number
from typing import Optional, Sequence

from ..core.config import get_flag_dtype, get_index_dtype
from ..core.device_operator import DeviceOperator
from ..core.dispatch import dispatch
from ..core.dtype import dtype_info
from ..core.tensor import Tensor
from ..operator.generate import Constant, Empty


def constant(value: Number, dtype: str, device: str = "auto") -> Tensor:
    dtype_info(dtype)
    (z,) = dispatch(DeviceOperator(Constant(value, dtype), device))
    return z


def empty(shape: Sequence[int], dtype: str, device: str = "auto") -> Tensor:
    dtype_info(dtype)
    (z,) = dispatch(DeviceOperator(Empty(tuple(shape), dtype), device))
    return z


def flag(device: str = "auto") -> Tensor:
    return constant(1.0, get_flag_dtype(), device)


def index_scalar(value: int, dtype: Optional[str] = None, device: str = "auto") -> Tensor:
    return constant(value, dtype or get_index_dtype(), device)

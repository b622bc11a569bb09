import os
from typing import Optional


_default_device: Optional[str] = None
_flag_dtype: Optional[str] = None
_index_dtype: Optional[str] = None


def get_default_device() -> str:
    """Backend for tensors created without a tensor argument."""
    global _default_device
    if _default_device is None:
        _default_device = os.getenv("FLOWCTL_DEVICE", "host")
    return _default_device


def get_flag_dtype() -> str:
    global _flag_dtype
    if _flag_dtype is None:
        _flag_dtype = os.getenv("FLOWCTL_FLAG_DTYPE", "float32")
    return _flag_dtype


def get_index_dtype() -> str:
    global _index_dtype
    if _index_dtype is None:
        _index_dtype = os.getenv("FLOWCTL_INDEX_DTYPE", "int32")
    return _index_dtype


def set_default_device(device: Optional[str]):
    global _default_device
    _default_device = device


def reset_config():
    global _default_device, _flag_dtype, _index_dtype
    _default_device = None
    _flag_dtype = None
    _index_dtype = None

from .tensor import HostTensor
from . import dispatch as _dispatch

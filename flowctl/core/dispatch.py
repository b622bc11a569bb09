import logging
from types import FunctionType
from typing import Dict, List, Optional, Protocol, Tuple, Type, overload

import nvtx

from .errors import DispatchError
from .object import FunctionSignature, Object, extract_function_signature, match_function_args
from .operator import Operator
from .tensor import Tensor

logger = logging.getLogger(__name__)

DISPATCH_CACHE: Dict[Tuple[Type, ...], FunctionType] = {}
DISPATCH_TABLE: List[Tuple[FunctionSignature, FunctionType, Optional["DispatchPredicate"], int]] = []


def lookup_implementation_from_types(tys: Tuple[Type, ...]) -> FunctionType:
    matching = []
    max_priority = None
    for signature, func, predicate, priority in DISPATCH_TABLE:
        match_result = match_function_args(signature, tys)
        if match_result is not None:
            predicate_result = predicate is None or predicate(*tys)
            if predicate_result:
                matching.append((func, priority))
                if max_priority is None or priority > max_priority:
                    max_priority = priority
    if len(matching) == 0:
        raise DispatchError(tys, "no matching implementation")
    selected = [func for func, priority in matching if priority == max_priority]
    if len(selected) != 1:
        raise DispatchError(tys, f"{len(selected)} implementations match")
    return selected[0]


@overload
def dispatch(operator: Operator, *args: Tensor) -> Tuple[Tensor, ...]:
    ...


def dispatch(*args: Object) -> Tuple[Tensor, ...]:
    arg_types = tuple([arg.type() for arg in args])
    try:
        func = DISPATCH_CACHE[arg_types]
    except KeyError:
        func = lookup_implementation_from_types(arg_types)
        DISPATCH_CACHE[arg_types] = func
    with nvtx.annotate(type(args[0]).__name__, domain="flowctl"):
        outputs = func(*args)
    return outputs


class DispatchPredicate(Protocol):
    def __call__(self, *args: Type) -> bool:
        ...


DEFAULT_PRIORITY = 0


def register_dispatch(*, predicate: Optional[DispatchPredicate] = None, priority: int = DEFAULT_PRIORITY):
    def decorator(function: FunctionType):
        signature = extract_function_signature(function)
        logger.debug("registering %s%s", function.__qualname__, signature)
        DISPATCH_TABLE.append((signature, function, predicate, priority))
        # new entries may shadow cached lookups
        DISPATCH_CACHE.clear()
        return function
    return decorator

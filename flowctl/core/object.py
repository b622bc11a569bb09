from dataclasses import dataclass
import inspect
from types import FunctionType
from typing import Literal, Optional, Tuple, Type, Union, get_args, get_origin
from typing_extensions import Self


class Object:
    def type(self) -> Type[Self]:
        raise NotImplementedError()


def simplify_type(ty: Type) -> Tuple[Type, ...]:
    if get_origin(ty) == Union:
        return tuple(
            simplified_arg
            for arg in get_args(ty)
            for simplified_arg in simplify_type(arg)
        )
    else:
        return (ty,)


@dataclass
class FunctionSignature:
    args: Tuple[Tuple[Type, ...], ...]
    vaargs: Optional[Tuple[Type, ...]]

    def __str__(self) -> str:
        def format_patterns(patterns: Tuple[Type, ...]):
            return " | ".join(getattr(pattern, "__name__", repr(pattern)) for pattern in patterns)
        args = [format_patterns(arg) for arg in self.args]
        if self.vaargs is not None:
            args.append("*" + format_patterns(self.vaargs))
        return f"({', '.join(args)})"


def extract_function_signature(fn: FunctionType) -> FunctionSignature:
    signature = inspect.signature(fn)
    args = []
    vaargs = None
    for param in signature.parameters.values():
        assert param.kind in [param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD, param.VAR_POSITIONAL]
        simplified = simplify_type(param.annotation)
        if param.kind == param.VAR_POSITIONAL:
            vaargs = simplified
        else:
            args.append(simplified)
    return FunctionSignature(tuple(args), vaargs)


def is_literal(ty: Type):
    return get_origin_or_self(ty) == Literal


def get_origin_or_self(ty: Type):
    return get_origin(ty) or ty


def is_union(ty: Type):
    return get_origin_or_self(ty) == Union


def match_pattern(pattern: Type, arg: Type):
    # literal
    if is_literal(pattern):
        if is_literal(arg) and pattern == arg:
            return pattern
        return None
    # object
    if is_union(pattern):
        for pattern_arg in get_args(pattern):
            result = match_pattern(pattern_arg, arg)
            if result is not None:
                return result
        return None
    # arg literal
    origin_pattern = get_origin_or_self(pattern)
    if is_literal(arg):
        if isinstance(get_args(arg)[0], origin_pattern):
            return pattern
        return None
    origin_arg = get_origin_or_self(arg)
    if not issubclass(origin_arg, origin_pattern):
        return None
    if get_args(pattern) == ():
        return pattern
    # parameterized patterns only match the same generic class
    if origin_arg != origin_pattern or get_args(arg) == ():
        return None
    for arg_arg, pattern_arg in zip(get_args(arg), get_args(pattern), strict=True):
        match_result = match_pattern(pattern_arg, arg_arg)
        if match_result is None:
            return None
    return pattern


def match_patterns(patterns: Tuple[Type, ...], arg: Type) -> Optional[Type]:
    for pattern in patterns:
        match_result = match_pattern(pattern, arg)
        if match_result is not None:
            return match_result
    return None


def match_function_args(signature: FunctionSignature, args: Tuple[Type, ...]):
    result = []
    if len(args) < len(signature.args):
        return None
    if len(args) > len(signature.args):
        if signature.vaargs is None:
            return None
    nr_args = len(signature.args)
    for i in range(nr_args):
        match_result = match_patterns(signature.args[i], args[i])
        if match_result is None:
            return None
        result.append(match_result)
    for arg in args[nr_args:]:
        match_result = match_patterns(signature.vaargs, arg)
        if match_result is None:
            return None
        result.append(match_result)
    return tuple(result)

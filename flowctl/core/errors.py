"""Error types raised by flowctl."""


class FlowControlError(Exception):
    """Base exception for all flowctl errors."""

    pass


class UnsupportedOperationError(FlowControlError):
    """Raised when a node's op kind is not a control-flow op."""

    def __init__(self, op: str):
        self.op = op
        super().__init__(f"Node type {op} is not implemented")


class InvalidStateError(FlowControlError):
    """Raised when an op is applied to state that cannot accept it."""

    pass


class DispatchError(FlowControlError):
    """Raised when no single implementation matches the argument types."""

    def __init__(self, arg_types: tuple, reason: str):
        self.arg_types = arg_types
        names = ", ".join(getattr(ty, "__name__", repr(ty)) for ty in arg_types)
        super().__init__(f"{reason} for ({names})")

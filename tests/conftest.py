"""Shared test fixtures."""

from typing import Dict, List, Optional

import numpy
import pytest

from flowctl.core.config import reset_config
from flowctl.executor.context import ExecutionContext
from flowctl.executor.node import AttrParam, InputParam, Node
from flowctl.host import HostTensor


def tensor(values, dtype: str = "float32") -> HostTensor:
    return HostTensor.from_numpy(numpy.array(values, dtype=dtype))


def make_node(
    op: str,
    name: str = "node",
    input_names: Optional[List[str]] = None,
    inputs: Optional[Dict[str, InputParam]] = None,
    attrs: Optional[Dict[str, object]] = None,
) -> Node:
    return Node(
        name=name,
        op=op,
        input_names=input_names or [],
        input_params=inputs or {},
        attr_params={key: AttrParam(value) for key, value in (attrs or {}).items()},
    )


@pytest.fixture(autouse=True)
def clean_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def context() -> ExecutionContext:
    return ExecutionContext()

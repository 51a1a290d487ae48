"""sqlbridge core: the boundary layer between host values and the engine.

- engine.py: one-time engine initialization and native handle creation
- handle.py: shared ownership of a native handle between a connection and its statements
- parameters.py: placeholder layout and parameter binding
- splitter.py: statement boundaries
- type_conversion.py: host <-> storage class marshalling
- error_mapper.py: engine failure translation
- result.py: execution result types
"""

from sqlbridge.core.engine import EngineInfo, initialize, is_initialized
from sqlbridge.core.handle import CLOSED_PLACEHOLDER, DatabaseHandle
from sqlbridge.core.parameters import ParameterInfo, ParameterLayout, bind_parameters, compile_layout
from sqlbridge.core.result import RunResult
from sqlbridge.core.splitter import split_first, split_statements
from sqlbridge.core.type_conversion import BindValueConverter, ResultValueConverter, StorageClass, classify

__all__ = (
    "CLOSED_PLACEHOLDER",
    "BindValueConverter",
    "DatabaseHandle",
    "EngineInfo",
    "ParameterInfo",
    "ParameterLayout",
    "ResultValueConverter",
    "RunResult",
    "StorageClass",
    "bind_parameters",
    "classify",
    "compile_layout",
    "initialize",
    "is_initialized",
    "split_first",
    "split_statements",
)

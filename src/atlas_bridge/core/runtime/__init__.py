"""
Runtime Adapters do Atlas Bridge.

Componentes:
    - adapter        → RuntimeAdapter (Protocol)
    - codec          → NativeCodec (objetos python <-> Value)
    - python_runtime → PythonRuntime (namespace python embarcado)
"""

from .adapter import RuntimeAdapter
from .codec import NativeCodec
from .python_runtime import PythonRuntime

__all__ = ["RuntimeAdapter", "NativeCodec", "PythonRuntime"]

"""
Native Exposer - Generate C++ bindings for exported members of managed assemblies
"""

from .generator import NativeBindingsGenerator, CompilationError
from .code_generators import (
    BuildGenerator,
    GenerationError,
    HeaderGenerator,
    SourceGenerator,
)
from .config import ExposerConfig
from .mangler import mangle
from .names import assembly_qualified_name, qualified_name
from .symbols import InMemorySymbolProvider, SymbolModel
from .type_mapper import TypeMapper

__version__ = "0.1.0"

__all__ = [
    "NativeBindingsGenerator",
    "CompilationError",
    "BuildGenerator",
    "GenerationError",
    "HeaderGenerator",
    "SourceGenerator",
    "ExposerConfig",
    "mangle",
    "assembly_qualified_name",
    "qualified_name",
    "InMemorySymbolProvider",
    "SymbolModel",
    "TypeMapper",
]

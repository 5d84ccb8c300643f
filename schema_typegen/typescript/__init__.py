"""TypeScript (Kysely) declaration emitter."""

from .generator import TypeScriptGenerator, generate
from .symbols import SymbolTable

__all__ = ["TypeScriptGenerator", "SymbolTable", "generate"]

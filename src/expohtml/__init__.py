from .compiler import Template, compile_file, compile_text, save_compiled
from .errors import FilterError, LexError, SecurityError, StructureError, TemplateError
from .filters import compile_expression
from .generator import CodeGenerator, compile_loop
from .options import CompileOptions
from .serialize import to_test_format
from .tokenizer import tokenize
from .tokens import ParseError
from .treebuilder import build_tree
from .validator import is_safe, validate

__all__ = [
    "CodeGenerator",
    "CompileOptions",
    "FilterError",
    "LexError",
    "ParseError",
    "SecurityError",
    "StructureError",
    "Template",
    "TemplateError",
    "build_tree",
    "compile_expression",
    "compile_file",
    "compile_loop",
    "compile_text",
    "is_safe",
    "save_compiled",
    "tokenize",
    "to_test_format",
    "validate",
]

# BUCL language package
# This package provides the parser and interpreter for the BUCL scripting language.
from .errors import BuclError, ErrorVal
from .interpreter import run_program, run_file, Interpreter
from .parser import parse_program
from .unparse import to_source

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'to_source',
    'Interpreter',
    'BuclError',
    'ErrorVal',
]

"""Interpreter for the BUCL language.

This module implements the evaluator: the argument evaluator that turns
AST arguments into text values, the binder that translates a call's
arguments into the callee's positional and named parameters, and the
dispatcher that runs builtins and user-defined functions. Each script
run and each function call gets its own `Environment`; nothing is shared
between them except through the argument/return protocol.
"""

from __future__ import annotations

import pathlib
import re
import sys
from typing import Dict, List, Optional, Tuple

from .arithmetic import evaluate as evaluate_math, format_number
from .ast import Argument, Literal, Program, Statement, Template, VarRef
from .builtin_function import BuiltinFunction, Invocation
from .environment import Environment, is_index
from .errors import BuclError, ErrorVal, BINDING_ERROR, EVALUATION_ERROR
from .host import Host
from .namespace import FunctionNamespace
from .parser import parse_program
from .std.io import BasicIO, populate_io_functions


RESERVED_NAMES = ('argc', 'args', 'target', 'return', 'count', 'length')

MAX_CALL_DEPTH = 100

DECIMAL = re.compile(r'[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')


def param_name(path: str) -> Optional[str]:
    """Name under which a variable passed as `{path}` is visible to the callee.

    `port` and `db/port` both give `port`. Numeric and reserved names
    give None.
    """
    base = path.rpartition('/')[2]
    if not base or is_index(base) or base in RESERVED_NAMES:
        return None
    return base


def parse_number(text: str) -> Optional[float]:
    if DECIMAL.fullmatch(text):
        return float(text)
    return None


def compare(lhs: str, op: str, rhs: str) -> bool:
    if op == '=':
        return lhs == rhs
    if op == '!=':
        return lhs != rhs
    left, right = parse_number(lhs), parse_number(rhs)
    if left is None or right is None:
        left, right = lhs, rhs
    if op == '>':
        return left > right
    if op == '<':
        return left < right
    if op == '>=':
        return left >= right
    if op == '<=':
        return left <= right
    raise BuclError(ErrorVal(EVALUATION_ERROR, f"unknown comparison operator '{op}'"))


def _to_int(text: str, what: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise BuclError(ErrorVal(EVALUATION_ERROR, f"{what}: '{text}' is not a valid integer"))


def _to_index(text: str, what: str) -> int:
    if not is_index(text):
        raise BuclError(ErrorVal(EVALUATION_ERROR, f"{what}: '{text}' is not a valid non-negative integer"))
    return int(text)


class Interpreter:
    """Core interpreter that executes BUCL statement trees."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 namespace: Optional[FunctionNamespace] = None, host: Optional[Host] = None,
                 io: Optional[BasicIO] = None, echo: bool = True):
        self.global_env = Environment()
        self.namespace = namespace if namespace is not None else FunctionNamespace()
        self.host = host if host is not None else Host()
        self.io = io if io is not None else BasicIO()
        self.echo = echo
        self.output: List[str] = []
        self.builtins: Dict[str, BuiltinFunction] = {}
        self.parsed: Dict[str, Program] = {}
        self.depth = 0
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w') if debug_level > 0 else None
        self.load_standard_module()

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def emit(self, line: str) -> None:
        self.output.append(line)
        if self.echo:
            print(line)

    # Standard module loading
    def load_standard_module(self):

        def std_assign(env: Environment, call: Invocation) -> Optional[str]:
            if call.target is not None:
                env.assign(call.target, call.args)
                if self.debug_level >= 2:
                    self.debug(f"assign {call.target} = {call.args!r}")
            return None

        def std_echo(env: Environment, call: Invocation) -> Optional[str]:
            self.emit(' '.join(call.args))
            return None

        def std_math(env: Environment, call: Invocation) -> Optional[str]:
            return format_number(evaluate_math(''.join(call.args)))

        def std_random(env: Environment, call: Invocation) -> Optional[str]:
            if 'max' in call.named:
                low = _to_int(call.named.get('min', '0'), 'random')
                high = _to_int(call.named['max'], 'random')
            elif not call.args:
                low, high = 0, sys.maxsize
            elif len(call.args) == 1:
                low, high = 0, _to_int(call.args[0], 'random')
            else:
                low, high = _to_int(call.args[0], 'random'), _to_int(call.args[1], 'random')
            if low > high:
                raise BuclError(ErrorVal(EVALUATION_ERROR, f"random: min ({low}) is greater than max ({high})"))
            return str(self.host.uniform_integer(low, high))

        def std_length(env: Environment, call: Invocation) -> Optional[str]:
            return str(sum(len(a) for a in call.args))

        def std_count(env: Environment, call: Invocation) -> Optional[str]:
            return str(len(call.args))

        def std_substr(env: Environment, call: Invocation) -> Optional[str]:
            start = _to_index(call.args[0], 'substr')
            size = _to_index(call.args[1], 'substr')
            text = call.args[2]
            start = min(start, len(text))
            return text[start:min(start + size, len(text))]

        def std_strpos(env: Environment, call: Invocation) -> Optional[str]:
            return str(call.args[0].find(call.args[1]))

        def std_cmp(env: Environment, call: Invocation) -> Optional[str]:
            left = parse_number(call.args[0]) or 0.0
            right = parse_number(call.args[1]) or 0.0
            if left > right:
                return '1'
            if left < right:
                return '-1'
            return '0'

        def std_getvar(env: Environment, call: Invocation) -> Optional[str]:
            return env.read(call.args[0])

        def std_setvar(env: Environment, call: Invocation) -> Optional[str]:
            env.assign(call.args[0], [call.args[1]])
            return None

        def std_sleep(env: Environment, call: Invocation) -> Optional[str]:
            seconds = parse_number(call.args[0])
            if seconds is None:
                raise BuclError(ErrorVal(EVALUATION_ERROR, f"sleep: '{call.args[0]}' is not a valid number of seconds"))
            if seconds < 0:
                raise BuclError(ErrorVal(EVALUATION_ERROR, f"sleep: duration must not be negative, got {call.args[0]}"))
            self.host.sleep(seconds)
            return None

        def std_if(env: Environment, call: Invocation) -> Optional[str]:
            if len(call.args) != 3:
                raise BuclError(ErrorVal(
                    EVALUATION_ERROR,
                    f"{call.function}: expected '<lhs> <op> <rhs>', got {len(call.args)} values"))
            lhs, op, rhs = call.args
            truthy = compare(lhs, op, rhs)
            if self.debug_level >= 3:
                self.debug(f"{call.function} {lhs!r} {op} {rhs!r} -> {truthy}")
            if truthy:
                self.execute_block(call.body or [], env)
            elif call.continuation is not None:
                self.execute(call.continuation, env)
            return None

        def std_else(env: Environment, call: Invocation) -> Optional[str]:
            self.execute_block(call.body or [], env)
            return None

        def std_repeat(env: Environment, call: Invocation) -> Optional[str]:
            prefix = call.target if call.target is not None else 'r'
            total = _to_index(call.args[0], 'repeat')
            env.set_counter(prefix, total)
            for i in range(total):
                env.put(f"{prefix}/index", str(i + 1))
                if self.debug_level >= 3:
                    self.debug(f"repeat {prefix} iteration {i + 1}/{total}")
                self.execute_block(call.body or [], env)
            return None

        def std_each(env: Environment, call: Invocation) -> Optional[str]:
            prefix = call.target if call.target is not None else 'e'
            env.assign(prefix, call.args)
            for i, item in enumerate(call.args):
                env.put(f"{prefix}/index", str(i))
                env.put(f"{prefix}/value", item)
                if self.debug_level >= 3:
                    self.debug(f"each {prefix} index {i} value {item!r}")
                self.execute_block(call.body or [], env)
            return None

        table = [
            BuiltinFunction('=', 0, std_assign),
            BuiltinFunction('echo', 0, std_echo),
            BuiltinFunction('math', 0, std_math),
            BuiltinFunction('random', 0, std_random),
            BuiltinFunction('length', 0, std_length),
            BuiltinFunction('count', 0, std_count),
            BuiltinFunction('substr', 3, std_substr),
            BuiltinFunction('strpos', 2, std_strpos),
            BuiltinFunction('cmp', 2, std_cmp),
            BuiltinFunction('getvar', 1, std_getvar),
            BuiltinFunction('setvar', 2, std_setvar),
            BuiltinFunction('sleep', 1, std_sleep),
            BuiltinFunction('if', 0, std_if),
            BuiltinFunction('elseif', 0, std_if),
            BuiltinFunction('else', 0, std_else),
            BuiltinFunction('repeat', 1, std_repeat),
            BuiltinFunction('each', 0, std_each),
        ]
        for builtin in table:
            self.builtins[builtin.name] = builtin
        self.builtins.update(populate_io_functions(self.io))

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> List[str]:
        if env is None:
            env = self.global_env
        try:
            self.execute_block(program.body, env)
        except RecursionError:
            raise BuclError(ErrorVal(EVALUATION_ERROR, 'maximum recursion depth exceeded'))
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        return self.output

    # Argument evaluation
    def evaluate_one(self, arg: Argument, env: Environment) -> str:
        if isinstance(arg, Literal):
            return arg.text
        if isinstance(arg, Template):
            return env.interpolate(arg.text)
        if isinstance(arg, VarRef):
            return env.read(arg.name)
        raise NotImplementedError(f"evaluate_one: unexpected node type {type(arg)}")

    def evaluate_list(self, args: List[Argument], env: Environment) -> List[str]:
        """Evaluate call arguments; an array passed as `{var}` is spliced."""
        values: List[str] = []
        for arg in args:
            if isinstance(arg, VarRef):
                path = env.resolve_name(arg.name)
                if env.is_array(path):
                    values.extend(env.elements(path))
                    continue
                values.append(env.read(path))
            else:
                values.append(self.evaluate_one(arg, env))
        return values

    def bind_arguments(self, args: List[Argument], env: Environment) -> Tuple[List[str], Dict[str, str]]:
        """Evaluate arguments into positional values and inferred named parameters.

        A `{var}` argument is visible to the callee under its last path
        segment. A variable with named children is expanded first: every
        child becomes one positional value and one named parameter. A
        spliced array contributes no names. Two different references
        inferring the same name are a binding error.
        """
        values: List[str] = []
        named: Dict[str, str] = {}
        sources: Dict[str, str] = {}
        for position, arg in enumerate(args):
            if not isinstance(arg, VarRef):
                values.extend(self.evaluate_list([arg], env))
                continue
            path = env.resolve_name(arg.name)
            fields = env.named_fields(path)
            if fields:
                values.extend(child_value for _, child_value in fields)
                bindings = [(child, f"{path}/{child}", child_value) for child, child_value in fields]
            else:
                values.extend(self.evaluate_list([VarRef(path)], env))
                if env.is_array(path):
                    continue
                bindings = [(param_name(path), path, values[-1])]
            for name, source, bound in bindings:
                if name is None or name in RESERVED_NAMES:
                    continue
                if name in sources and sources[name] != source:
                    raise BuclError(ErrorVal(
                        BINDING_ERROR,
                        f"duplicate named parameter '{name}' ({{{sources[name]}}} and {{{source}}}, argument {position})"))
                sources[name] = source
                named[name] = bound
        return values, named

    # Execution
    def execute_block(self, statements: List[Statement], env: Environment) -> None:
        for stmt in statements:
            self.execute(stmt, env)

    def execute(self, stmt: Statement, env: Environment) -> None:
        try:
            values, named = self.bind_arguments(stmt.arguments, env)
            target = env.resolve_name(stmt.target) if stmt.target is not None else None
            if self.debug_level >= 2:
                self.debug(f"line {stmt.line}: {stmt.function} target={target} args={values!r}")
            call = Invocation(stmt.function, target, values, named, stmt.body, stmt.continuation)
            builtin = self.builtins.get(stmt.function)
            if builtin is not None:
                if len(values) < builtin.min_args:
                    raise BuclError(ErrorVal(
                        EVALUATION_ERROR,
                        f"{builtin.name}: expects at least {builtin.min_args} arguments, got {len(values)}"))
                result = builtin.fn(env, call)
                if target is not None and result is not None:
                    env.assign(target, [result])
                return
            self.call_function(call, env)
        except BuclError as ex:
            if ex.err.line is None:
                ex.err.line = stmt.line
            raise

    def load_function(self, name: str) -> Program:
        source = self.namespace.lookup(name)
        if source is None:
            raise BuclError(ErrorVal(BINDING_ERROR, f"unknown function '{name}'"))
        program = self.parsed.get(source)
        if program is None:
            program = self.parsed[source] = parse_program(source)
        return program

    def call_function(self, call: Invocation, env: Environment) -> None:
        """Run a user-defined function in a fresh environment.

        The callee sees `{0}`, `{1}`, ... and `{args}` for its positional
        arguments, `{argc}`, `{target}` and the inferred named parameters.
        It returns through `{return}` and any `{return/...}` sub-variables,
        which are copied onto the caller's target after the scalar return
        value so an explicit `{return/count}` wins.
        """
        program = self.load_function(call.function)
        if self.depth >= MAX_CALL_DEPTH:
            raise BuclError(ErrorVal(EVALUATION_ERROR, f"maximum call depth {MAX_CALL_DEPTH} exceeded in '{call.function}'"))

        callee = Environment()
        callee.assign('argc', [str(len(call.args))])
        for i, value in enumerate(call.args):
            callee.assign(str(i), [value])
        callee.install_arguments('args', call.args)
        if call.target is not None:
            callee.assign('target', [call.target])
        for name, value in call.named.items():
            callee.assign(name, [value])

        if self.debug_level >= 1:
            self.debug(f"call {call.function} args={call.args!r} named={call.named!r}")
        self.depth += 1
        try:
            self.execute_block(program.body, callee)
        finally:
            self.depth -= 1

        if call.target is None:
            return
        returned = callee.lookup('return')
        if returned is not None and returned.value is not None:
            env.assign(call.target, [returned.value])
        for relative, value in callee.subtree('return'):
            env.write(f"{call.target}/{relative}", value)
        if self.debug_level >= 1:
            self.debug(f"return {call.function} -> {call.target} = {env.read(call.target)!r}")


def run_program(source: str, debug_level: int = 0) -> List[str]:
    """Convenience function to parse and run a BUCL program from a source string."""
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    return interpreter.run(ast_program)


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Run a BUCL file, resolving user functions next to it, and return the interpreter."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    ast_program = parse_program(source)
    namespace = FunctionNamespace(base_dir=pathlib.Path(file_path).resolve().parent)
    interpreter = Interpreter(debug_level=debug_level, namespace=namespace)
    interpreter.run(ast_program)
    return interpreter

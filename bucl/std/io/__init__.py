from .basic_io import BasicIO, SandboxedIO
from bucl.builtin_function import BuiltinFunction, Invocation
from bucl.environment import Environment
from bucl.errors import BuclError, ErrorVal, EVALUATION_ERROR
from typing import Dict, Optional


def populate_io_functions(basic_io: BasicIO) -> Dict[str, BuiltinFunction]:
        def std_readfile(env: Environment, call: Invocation) -> Optional[str]:
            path = call.named_or_positional('path', 0)
            if path is None:
                raise BuclError(ErrorVal(EVALUATION_ERROR, 'readfile: missing path argument'))
            return basic_io.read_file(path)

        def std_writefile(env: Environment, call: Invocation) -> Optional[str]:
            path = call.named_or_positional('path', 0)
            if path is None:
                raise BuclError(ErrorVal(EVALUATION_ERROR, 'writefile: requires a path and content'))
            if 'content' in call.named:
                content = call.named['content']
            else:
                content = ''.join(call.args[1:])
            basic_io.write_file(path, content)
            return content

        return {
            'readfile': BuiltinFunction('readfile', 1, std_readfile),
            'writefile': BuiltinFunction('writefile', 1, std_writefile),
        }


__all__ = ['BasicIO', 'SandboxedIO', 'populate_io_functions']

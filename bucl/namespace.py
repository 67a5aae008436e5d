"""Lookup of user-defined BUCL functions.

A call to a name that is not a builtin is resolved here, lazily, each
time it is made. Sources are searched in order:

1. functions registered with `define` (embedding hosts, tests);
2. the standard library bundled in `bucl/std/lib`;
3. `functions/<name>.bucl` relative to `base_dir`, then relative to the
   current working directory, unless the filesystem is disabled.
"""

from __future__ import annotations

import pathlib
from typing import Dict, List, Optional, Union


STDLIB_DIR = pathlib.Path(__file__).parent / 'std' / 'lib'

SUFFIX = '.bucl'


def load_stdlib() -> Dict[str, str]:
    sources: Dict[str, str] = {}
    for path in sorted(STDLIB_DIR.glob('*' + SUFFIX)):
        sources[path.stem] = path.read_text(encoding='utf-8')
    return sources


class FunctionNamespace:
    def __init__(self, base_dir: Union[str, pathlib.Path, None] = None, use_filesystem: bool = True):
        self.base_dir = pathlib.Path(base_dir) if base_dir is not None else None
        self.use_filesystem = use_filesystem
        self.defined: Dict[str, str] = {}
        self.stdlib = load_stdlib()

    def define(self, name: str, source: str) -> None:
        self.defined[name] = source

    def search_paths(self) -> List[pathlib.Path]:
        paths = []
        if self.base_dir is not None:
            paths.append(self.base_dir / 'functions')
        paths.append(pathlib.Path('functions'))
        return paths

    def lookup(self, name: str) -> Optional[str]:
        if name in self.defined:
            return self.defined[name]
        if name in self.stdlib:
            return self.stdlib[name]
        if not self.use_filesystem or not name or '/' in name or '\\' in name or name.startswith('.'):
            return None
        for directory in self.search_paths():
            candidate = directory / (name + SUFFIX)
            if candidate.is_file():
                return candidate.read_text(encoding='utf-8')
        return None

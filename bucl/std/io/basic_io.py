from bucl.errors import BuclError, ErrorVal, IO_ERROR


class BasicIO:
    def read_file(self, path: str) -> str:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            raise BuclError(ErrorVal(IO_ERROR, f"File not found: {path}"))
        except PermissionError:
            raise BuclError(ErrorVal(IO_ERROR, f"Permission denied: {path}"))
        except (OSError, UnicodeDecodeError) as e:
            raise BuclError(ErrorVal(IO_ERROR, f"Error reading {path}: {e}"))

    def write_file(self, path: str, data: str) -> None:
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(data)
        except PermissionError:
            raise BuclError(ErrorVal(IO_ERROR, f"Permission denied: {path}"))
        except OSError as e:
            raise BuclError(ErrorVal(IO_ERROR, f"Error writing {path}: {e}"))


class SandboxedIO(BasicIO):
    """File access for hosts without a filesystem: every call fails."""
    def read_file(self, path: str) -> str:
        raise BuclError(ErrorVal(IO_ERROR, 'readfile: not available in this environment'))

    def write_file(self, path: str, data: str) -> None:
        raise BuclError(ErrorVal(IO_ERROR, 'writefile: not available in this environment'))

from typing import List, Optional


class FlowchartError(Exception):
    """Base class for every fatal pipeline failure."""
    exit_code: int = 1


class SourceLoadError(FlowchartError):
    exit_code = 2

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class FunctionNotFoundError(FlowchartError):
    exit_code = 3

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"function '{name}' not found")


class AmbiguousFunctionError(FlowchartError):
    exit_code = 3

    def __init__(self, name: str, locations: List[str]):
        self.name = name
        self.locations = locations
        super().__init__(
            f"function '{name}' is declared {len(locations)} times ({', '.join(locations)}); "
            "pass a qualified name such as Class.method"
        )


class OutputWriteError(FlowchartError):
    exit_code = 4

    def __init__(self, path: str, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"error writing {path}: {cause}")

class FareBenchError(Exception):
    """Base class for every failure that aborts a benchmark run."""


class ConfigError(FareBenchError, ValueError):
    pass


class ParseError(FareBenchError, ValueError):
    def __init__(self, message: str, path=None, line: int | None = None):
        self.path = path
        self.line = line
        where = ""
        if path is not None:
            where = f"{path}:{line}: " if line is not None else f"{path}: "
        super().__init__(where + message)


class ArtifactIOError(FareBenchError, OSError):
    pass


class ArtifactNotFound(ArtifactIOError):
    pass


class TrainingError(FareBenchError, RuntimeError):
    pass


class PredictionError(FareBenchError, RuntimeError):
    pass

from typing import Iterable, List

from sklearn.exceptions import NotFittedError as SklearnNotFittedError


class PipelineError(ValueError):
    """Base class for feature pipeline failures"""


class ShapeMismatchError(PipelineError):
    """Raised when two aligned inputs have different lengths"""


class UndefinedTransformError(PipelineError):
    """Raised when a Box-Cox transform receives non-positive input"""


class DegenerateScaleError(PipelineError):
    """Raised when a column with zero standard deviation is standardized"""


class ColumnMissingError(PipelineError):
    """Raised when a table lacks columns required by a fitted transform"""

    def __init__(self, columns: Iterable[str], context: str = "table"):
        self.columns: List[str] = list(columns)
        super().__init__(f"Columns not found in {context}: {self.columns}")


class MissingValueError(PipelineError):
    """Raised when a column read by a fitted transform holds missing values"""

    def __init__(self, columns: Iterable[str], context: str = "table"):
        self.columns: List[str] = list(columns)
        super().__init__(f"Columns with missing values in {context}: {self.columns}")


class NotFittedError(SklearnNotFittedError, PipelineError):
    """Raised when a transform is applied before it has been fitted"""


def require_columns(table, columns: Iterable[str], context: str = "table") -> None:
    """Raise ColumnMissingError listing every column of `columns` absent from `table`"""
    missing = [col for col in columns if col not in table.columns]
    if missing:
        raise ColumnMissingError(missing, context)


def require_complete(table, columns: Iterable[str], context: str = "table") -> None:
    """Raise MissingValueError listing every column of `columns` that holds NaN in `table`"""
    incomplete = [col for col in columns if table[col].isna().any()]
    if incomplete:
        raise MissingValueError(incomplete, context)

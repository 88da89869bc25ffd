"""Exception hierarchy for the Power Index scoring engine.

SchemaError       – malformed weight structure; fatal at configuration load.
NormalizationError – invalid raw/basis value; recoverable per entity.
ComparisonError   – two results scored under different schemas.
RecordError       – record carries indicator keys the schema does not define.
"""


class PowerIndexError(Exception):
    """Base class for all scoring-engine errors."""


class SchemaError(PowerIndexError):
    """Domain or sub-indicator weights violate the schema invariants."""


class NormalizationError(PowerIndexError):
    """A raw value or basis value cannot be normalized."""


class ComparisonError(PowerIndexError):
    """Two score results cannot be compared."""


class RecordError(PowerIndexError):
    """A state record does not match the schema's indicator key set."""

    def __init__(self, message: str, unknown_keys: tuple = ()) -> None:
        super().__init__(message)
        self.unknown_keys = tuple(unknown_keys)

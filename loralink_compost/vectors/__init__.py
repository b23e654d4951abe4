from loralink_compost.vectors.driver import BANNER, DriverState, EmittedVector, VectorDriver
from loralink_compost.vectors.fixtures import (
    FixtureError,
    FixtureMismatch,
    check_fixtures,
    parse_record_line,
    read_fixture_pairs,
)
from loralink_compost.vectors.render import format_hex, format_measurement
from loralink_compost.vectors.tokens import ParseFailure, Parsed, TokenReader

__all__ = [
    "BANNER",
    "DriverState",
    "EmittedVector",
    "VectorDriver",
    "FixtureError",
    "FixtureMismatch",
    "check_fixtures",
    "parse_record_line",
    "read_fixture_pairs",
    "format_hex",
    "format_measurement",
    "ParseFailure",
    "Parsed",
    "TokenReader",
]

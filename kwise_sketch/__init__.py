"""kwise_sketch package public API."""
import logging

from ._metadata import __version__
from .dyadic import cover, interval_level, is_power_of_two, max_cover_size
from .errors import (
    DimensionMismatchError,
    IndexOutOfBoundsError,
    InvalidRangeError,
    SketchError,
)
from .fast_agms import FastAGMS, item_id
from .kwise_hash import (
    MERSENNE_PRIME,
    BinHash,
    PolynomialHashFamily,
    SignHash,
    estimate_frequency,
    fast_mersenne_mod,
    sign_balance_report,
    tug_of_war_sketch,
)
from .logging_config import configure_from_env, disable_logging, enable_console_logging, set_level
from .random_source import SplitMix64
from .range_sketch import DyadicRangeSketch

logging.getLogger(__name__).addHandler(logging.NullHandler())


class DeterministicRandomSource(SplitMix64):
    """Alias for :class:`SplitMix64`."""


__all__ = [
    "BinHash",
    "DeterministicRandomSource",
    "DimensionMismatchError",
    "DyadicRangeSketch",
    "FastAGMS",
    "IndexOutOfBoundsError",
    "InvalidRangeError",
    "MERSENNE_PRIME",
    "PolynomialHashFamily",
    "SignHash",
    "SketchError",
    "SplitMix64",
    "configure_from_env",
    "cover",
    "disable_logging",
    "enable_console_logging",
    "estimate_frequency",
    "fast_mersenne_mod",
    "interval_level",
    "is_power_of_two",
    "item_id",
    "max_cover_size",
    "set_level",
    "sign_balance_report",
    "tug_of_war_sketch",
    "__version__",
]

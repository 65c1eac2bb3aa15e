"""Quality threshold store.

Thresholds are read from a small line-oriented subset of TOML:

    # comment
    [section]
    key = value   # trailing comment

Values are auto-detected: a float when the text contains ``.`` or an
``e-``/``e+`` exponent, otherwise an integer, otherwise the raw string.
The store is read-only once built and can be shared between analyses.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Union

from ..exceptions import (
    ThresholdConfigError,
    ThresholdFileNotFoundError,
    ThresholdParseError,
)
from .paths import DEFAULT_THRESHOLDS_PATH

logger = logging.getLogger(__name__)

ThresholdValue = Union[int, float, str]

L2_NORM_THRESHOLDS = "l2_norm_thresholds"
PARAMETER_RECOVERY = "parameter_recovery"
CONVERGENCE = "convergence"
OBJECTIVE_DISTRIBUTION = "objective_distribution"


def parse_value(raw: str) -> ThresholdValue:
    """Convert a raw value string to float, int or str."""
    lowered = raw.lower()
    try:
        if "e-" in lowered or "e+" in lowered or "." in raw:
            return float(raw)
        return int(raw)
    except ValueError:
        return raw


class ThresholdStore(Mapping[str, Mapping[str, ThresholdValue]]):
    """Read-only mapping of category -> key -> threshold value."""

    def __init__(
        self,
        categories: Mapping[str, Mapping[str, ThresholdValue]],
        source: Optional[str] = None,
    ) -> None:
        self._categories = MappingProxyType(
            {name: MappingProxyType(dict(values)) for name, values in categories.items()}
        )
        self.source = source

    def __getitem__(self, category: str) -> Mapping[str, ThresholdValue]:
        return self._categories[category]

    def __iter__(self) -> Iterator[str]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def __repr__(self) -> str:
        return f"ThresholdStore(categories={list(self._categories)}, source={self.source!r})"

    def category(self, name: str) -> Mapping[str, ThresholdValue]:
        """Return a category, raising ThresholdConfigError when absent."""
        try:
            return self._categories[name]
        except KeyError:
            raise ThresholdConfigError(
                f"Missing threshold category [{name}]"
                + (f" in {self.source}" if self.source else "")
            ) from None

    def value(self, category: str, key: str) -> ThresholdValue:
        values = self.category(category)
        try:
            return values[key]
        except KeyError:
            raise ThresholdConfigError(
                f"Missing threshold '{key}' in category [{category}]"
            ) from None

    def number(self, category: str, key: str) -> float:
        """Return a numeric threshold; text values are a configuration error."""
        value = self.value(category, key)
        if isinstance(value, str):
            raise ThresholdConfigError(
                f"Threshold [{category}].{key} must be numeric, got {value!r}"
            )
        return float(value)

    def integer(self, category: str, key: str) -> int:
        value = self.value(category, key)
        if isinstance(value, str):
            raise ThresholdConfigError(
                f"Threshold [{category}].{key} must be numeric, got {value!r}"
            )
        if isinstance(value, float) and not value.is_integer():
            raise ThresholdConfigError(
                f"Threshold [{category}].{key} must be a whole number, got {value!r}"
            )
        return int(value)

    def to_dict(self) -> Dict[str, Dict[str, ThresholdValue]]:
        return {name: dict(values) for name, values in self._categories.items()}


def parse_thresholds(text: str, source: Optional[str] = None) -> ThresholdStore:
    """Parse threshold configuration text into a ThresholdStore.

    Args:
        text: Configuration text
        source: Optional name of the origin (used in error messages)

    Returns:
        ThresholdStore with one mapping per [section]

    Raises:
        ThresholdParseError: a key/value line appears before any section
    """
    categories: Dict[str, Dict[str, ThresholdValue]] = {}
    current: Optional[str] = None

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()

        if not line or line.startswith("#"):
            continue

        if line.startswith("[") and line.endswith("]"):
            current = line[1:-1].strip()
            categories[current] = {}
            continue

        if "=" not in line:
            logger.debug("Ignoring line %d without '=': %r", lineno, line)
            continue

        if current is None:
            raise ThresholdParseError(
                f"Line {lineno}: key/value outside of any [section]: {line!r}"
                + (f" ({source})" if source else "")
            )

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if "#" in value:
            value = value.split("#", 1)[0].strip()

        categories[current][key] = parse_value(value)

    return ThresholdStore(categories, source=source)


def load_quality_thresholds(config_path: Union[Path, str, None] = None) -> ThresholdStore:
    """Load quality thresholds from a configuration file.

    Args:
        config_path: Path to the thresholds file (default: bundled file)

    Returns:
        ThresholdStore with the l2_norm_thresholds, parameter_recovery,
        convergence and objective_distribution categories

    Raises:
        ThresholdFileNotFoundError: the file does not exist
    """
    path = Path(config_path) if config_path is not None else DEFAULT_THRESHOLDS_PATH
    if not path.is_file():
        raise ThresholdFileNotFoundError(f"Quality thresholds file not found: {path}")

    store = parse_thresholds(path.read_text(encoding="utf-8"), source=str(path))
    logger.info("Loaded %d threshold categories from %s", len(store), path)
    return store

"""Per-session analyzer settings and their validation."""

import math
import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# Scale applied on top of the Hann curve. ``hann_norm`` matches the
# normalized Hann window of the platform DSP library.
WINDOW_NORMALIZATIONS: Dict[str, float] = {
    "none": 1.0,
    "hann_norm": 0.8165,
    "coherent_gain": 2.0,
}

# ``amplitude`` rescales bins by 2/N so a full-scale sine reads near its amplitude.
SPECTRUM_SCALINGS = ("raw", "amplitude")

PROFILES: Dict[str, Dict[str, Any]] = {
    # Line spectrum with a frequency axis
    "detailed": {
        "frame_size": 4096,
        "magnitude_floor": 1e-20,
        "db_min": -120.0,
        "db_max": 0.0,
        "spectrum_scaling": "amplitude",
    },
    # Normalized bar display
    "bars": {
        "frame_size": 1024,
        "magnitude_floor": 1e-10,
        "db_min": -50.0,
        "db_max": 50.0,
        "spectrum_scaling": "raw",
    },
}


def is_power_of_two(value: int) -> bool:
    return isinstance(value, int) and value > 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class SessionConfig:
    """Settings shared by every analysis cycle of one capture session."""
    frame_size: int = 1024
    sample_rate: Optional[float] = None  # Negotiated by the capture device at start
    min_publish_interval_ms: float = 50.0
    db_min: float = -120.0
    db_max: float = 0.0
    magnitude_floor: float = 1e-10
    window_normalization: str = "hann_norm"
    spectrum_scaling: str = "amplitude"

    @property
    def bin_count(self) -> int:
        return self.frame_size // 2

    @property
    def window_scale(self) -> float:
        return WINDOW_NORMALIZATIONS[self.window_normalization]

    def validate(self, require_sample_rate: bool = False) -> "SessionConfig":
        """Check every setting, raising ConfigurationError on the first bad one.

        Args:
            require_sample_rate: Also demand a usable sample rate

        Returns:
            self, so calls can be chained
        """
        if isinstance(self.frame_size, bool) or not is_power_of_two(self.frame_size) or self.frame_size < 2:
            raise ConfigurationError(
                f"frame_size must be a power of two >= 2, got {self.frame_size!r}")

        if self.sample_rate is not None or require_sample_rate:
            validate_sample_rate(self.sample_rate)

        if not _is_number(self.magnitude_floor) or not math.isfinite(self.magnitude_floor) \
                or self.magnitude_floor <= 0:
            raise ConfigurationError(
                f"magnitude_floor must be a positive finite number, got {self.magnitude_floor!r}")

        if not _is_number(self.min_publish_interval_ms) or self.min_publish_interval_ms < 0:
            raise ConfigurationError(
                f"min_publish_interval_ms must be >= 0, got {self.min_publish_interval_ms!r}")

        if not (_is_number(self.db_min) and _is_number(self.db_max)) or self.db_min >= self.db_max:
            raise ConfigurationError(
                f"db_min must be below db_max, got [{self.db_min!r}, {self.db_max!r}]")

        if self.window_normalization not in WINDOW_NORMALIZATIONS:
            raise ConfigurationError(
                f"Unknown window_normalization {self.window_normalization!r}, "
                f"expected one of {sorted(WINDOW_NORMALIZATIONS)}")

        if self.spectrum_scaling not in SPECTRUM_SCALINGS:
            raise ConfigurationError(
                f"Unknown spectrum_scaling {self.spectrum_scaling!r}, "
                f"expected one of {list(SPECTRUM_SCALINGS)}")

        return self

    def for_session(self, sample_rate: float) -> "SessionConfig":
        """Return a validated copy bound to the device's negotiated sample rate."""
        return replace(self, sample_rate=sample_rate).validate(require_sample_rate=True)

    @classmethod
    def from_profile(cls, profile: Optional[str], **overrides: Any) -> "SessionConfig":
        """Build settings from a named profile with explicit overrides on top."""
        values: Dict[str, Any] = {}
        if profile:
            if profile not in PROFILES:
                raise ConfigurationError(
                    f"Unknown profile {profile!r}, expected one of {sorted(PROFILES)}")
            values.update(PROFILES[profile])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values).validate()

    @classmethod
    def from_config(cls, config, sample_rate: Optional[float] = None) -> "SessionConfig":
        """Build settings from the ``analyzer`` section of a MicscopeConfig."""
        overrides = {}
        for field in fields(cls):
            if field.name == "sample_rate":
                continue
            value = config.get(f"analyzer.{field.name}")
            if value is not None:
                overrides[field.name] = value

        session_config = cls.from_profile(config.get("analyzer.profile"), **overrides)
        if sample_rate is not None:
            session_config = session_config.for_session(sample_rate)

        logger.debug(f"Session config resolved: {session_config}")
        return session_config


def validate_sample_rate(sample_rate: Any) -> float:
    if not _is_number(sample_rate) or not math.isfinite(sample_rate) or sample_rate <= 0:
        raise ConfigurationError(f"sample_rate must be a positive number, got {sample_rate!r}")
    return float(sample_rate)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

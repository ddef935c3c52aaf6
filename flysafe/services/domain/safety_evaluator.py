"""
Domain service: Rule-based flight safety evaluation.

Compares a weather snapshot against a drone envelope and produces a
three-tier verdict:
- RED: at least one hard limit is breached (not safe to fly)
- ORANGE: every limit holds but at least one metric is marginal
- GREEN: all conditions are comfortably within limits
"""
from typing import Optional
from dataclasses import dataclass
import math
import logging

from flysafe.domain.errors import InvalidInputError
from flysafe.domain.models import (
    DroneEnvelope,
    IndicatorColor,
    PrecipitationType,
    SafetyVerdict,
    WeatherSnapshot,
)
from flysafe.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationConfig:
    """Thresholds and marginal bands used by the evaluator."""

    wind_margin_ratio: float = 0.1
    """Wind at or above (1 - ratio) of the drone limit is marginal"""

    temperature_margin_c: float = 2.0
    """Temperature within this many degrees of a drone limit is marginal"""

    freezing_point_c: float = 0.0
    """Temperatures below freezing point + margin degrade battery performance"""

    min_visibility_m: float = 2000.0
    """Minimum horizontal visibility for visual line of sight"""

    visibility_margin_ratio: float = 0.1
    """Visibility below (1 + ratio) of the minimum is marginal"""

    min_cloud_base_m: float = 120.0
    """Minimum cloud base height above ground"""

    cloud_cover_caution_pct: float = 90.0
    """Cloud cover above this percentage is marginal"""

    @classmethod
    def from_settings(cls) -> "EvaluationConfig":
        return cls(
            wind_margin_ratio=settings.wind_margin_ratio,
            temperature_margin_c=settings.temperature_margin_c,
            freezing_point_c=settings.freezing_point_c,
            min_visibility_m=settings.min_visibility_m,
            visibility_margin_ratio=settings.visibility_margin_ratio,
            min_cloud_base_m=settings.min_cloud_base_m,
            cloud_cover_caution_pct=settings.cloud_cover_caution_pct,
        )


def _require_finite(**values: Optional[float]) -> None:
    for field, value in values.items():
        if value is not None and not math.isfinite(value):
            raise InvalidInputError(f"{field} must be a finite number, got {value!r}")


class SafetyEvaluator:
    """
    Domain service turning weather and drone limits into a safety verdict.

    Evaluation is pure: the same inputs always give the same verdict.
    Optional weather fields (visibility, cloud cover, cloud base) are only
    evaluated when the provider reported them.
    """

    def __init__(self, config: Optional[EvaluationConfig] = None):
        self.config = config or EvaluationConfig.from_settings()

    def evaluate(
        self,
        weather: WeatherSnapshot,
        envelope: DroneEnvelope,
    ) -> SafetyVerdict:
        """
        Evaluate flight safety.

        Args:
            weather: Current conditions at the selected point
            envelope: Operating limits of the selected drone

        Returns:
            SafetyVerdict with color, fly/no-fly flag and rationale

        Raises:
            InvalidInputError: If any numeric input is NaN or infinite
        """
        _require_finite(
            temperature=weather.temperature,
            wind_speed=weather.wind_speed,
            wind_gust=weather.wind_gust,
            visibility=weather.visibility,
            cloud_cover=weather.cloud_cover,
            cloud_base_height=weather.cloud_base_height,
            max_wind_speed=envelope.max_wind_speed,
            min_temperature=envelope.min_temperature,
            max_temperature=envelope.max_temperature,
        )

        violations = self._find_violations(weather, envelope)
        if violations:
            verdict = SafetyVerdict(
                safe_to_fly=False,
                indicator_color=IndicatorColor.RED,
                message="Not safe to fly. " + " ".join(violations),
            )
        else:
            cautions = self._find_cautions(weather, envelope)
            if cautions:
                verdict = SafetyVerdict(
                    safe_to_fly=True,
                    indicator_color=IndicatorColor.ORANGE,
                    message="Caution advised. " + " ".join(cautions),
                )
            else:
                verdict = SafetyVerdict(
                    safe_to_fly=True,
                    indicator_color=IndicatorColor.GREEN,
                    message=(
                        f"Safe to fly. Conditions are well within the limits of {envelope.name}."
                    ),
                )

        logger.debug(f"Safety verdict for {envelope.name}: {verdict.indicator_color.value}")
        return verdict

    def _find_violations(
        self,
        weather: WeatherSnapshot,
        envelope: DroneEnvelope,
    ) -> list[str]:
        """Hard limit breaches, in a stable order."""
        cfg = self.config
        violations = []

        if weather.wind_speed > envelope.max_wind_speed:
            violations.append(
                f"Wind speed {weather.wind_speed:.1f} m/s exceeds the drone limit "
                f"of {envelope.max_wind_speed} m/s."
            )
        if weather.wind_gust > envelope.max_wind_speed:
            violations.append(
                f"Wind gusts {weather.wind_gust:.1f} m/s exceed the drone limit "
                f"of {envelope.max_wind_speed} m/s."
            )
        if weather.temperature < envelope.min_temperature:
            violations.append(
                f"Temperature {weather.temperature:.1f} °C is below the drone minimum "
                f"of {envelope.min_temperature} °C."
            )
        if weather.temperature > envelope.max_temperature:
            violations.append(
                f"Temperature {weather.temperature:.1f} °C is above the drone maximum "
                f"of {envelope.max_temperature} °C."
            )
        if weather.precipitation_type != PrecipitationType.NONE:
            violations.append(
                f"Precipitation ({weather.precipitation_type.value}) is reported."
            )
        if weather.visibility is not None and weather.visibility < cfg.min_visibility_m:
            violations.append(
                f"Visibility {weather.visibility:.0f} m is below the "
                f"{cfg.min_visibility_m:.0f} m required for visual line of sight."
            )
        if (
            weather.cloud_base_height is not None
            and weather.cloud_base_height < cfg.min_cloud_base_m
        ):
            violations.append(
                f"Cloud base {weather.cloud_base_height:.0f} m is below "
                f"{cfg.min_cloud_base_m:.0f} m."
            )

        return violations

    def _find_cautions(
        self,
        weather: WeatherSnapshot,
        envelope: DroneEnvelope,
    ) -> list[str]:
        """Marginal conditions; only consulted when no hard limit is breached."""
        cfg = self.config
        cautions = []

        wind_caution_level = envelope.max_wind_speed * (1 - cfg.wind_margin_ratio)
        if weather.wind_speed >= wind_caution_level:
            cautions.append(
                f"Wind speed {weather.wind_speed:.1f} m/s is close to the drone limit "
                f"of {envelope.max_wind_speed} m/s."
            )
        if weather.wind_gust >= wind_caution_level:
            cautions.append(
                f"Wind gusts {weather.wind_gust:.1f} m/s are close to the drone limit "
                f"of {envelope.max_wind_speed} m/s."
            )
        if weather.temperature - envelope.min_temperature <= cfg.temperature_margin_c:
            cautions.append(
                f"Temperature {weather.temperature:.1f} °C is close to the drone minimum "
                f"of {envelope.min_temperature} °C."
            )
        if envelope.max_temperature - weather.temperature <= cfg.temperature_margin_c:
            cautions.append(
                f"Temperature {weather.temperature:.1f} °C is close to the drone maximum "
                f"of {envelope.max_temperature} °C."
            )
        if weather.temperature < cfg.freezing_point_c + cfg.temperature_margin_c:
            cautions.append(
                f"Temperature {weather.temperature:.1f} °C is near freezing; "
                f"expect reduced battery performance."
            )
        if (
            weather.visibility is not None
            and weather.visibility < cfg.min_visibility_m * (1 + cfg.visibility_margin_ratio)
        ):
            cautions.append(
                f"Visibility {weather.visibility:.0f} m is only just above "
                f"{cfg.min_visibility_m:.0f} m."
            )
        if (
            weather.cloud_cover is not None
            and weather.cloud_cover > cfg.cloud_cover_caution_pct
        ):
            cautions.append(f"Cloud cover is high ({weather.cloud_cover:.0f}%).")

        return cautions


def fail_safe_verdict(reason: str) -> SafetyVerdict:
    """
    Verdict shown when no evaluation could be made.

    Always RED so that missing data is never presented as safe.
    """
    return SafetyVerdict(
        safe_to_fly=False,
        indicator_color=IndicatorColor.RED,
        message=f"Safety could not be assessed: {reason}. Do not fly until conditions can be verified.",
    )

"""
Preset drone envelopes.
"""
from flysafe.domain.errors import InvalidInputError
from flysafe.domain.models import DroneEnvelope


DJI_MINI_4_PRO_PROFILE = DroneEnvelope(
    name="DJI Mini 4 Pro",
    max_wind_speed=10.7,
    min_temperature=-10,
    max_temperature=40,
)

DJI_AVATA_2_PROFILE = DroneEnvelope(
    name="DJI Avata 2",
    max_wind_speed=10.7,
    min_temperature=-10,
    max_temperature=40,
)

DEFAULT_DRONE_PROFILES = [
    DJI_MINI_4_PRO_PROFILE,
    DJI_AVATA_2_PROFILE,
]


def get_profile(name: str) -> DroneEnvelope:
    """
    Look up a preset envelope by name (case-insensitive).

    Raises:
        InvalidInputError: If no preset has that name
    """
    wanted = name.strip().lower()
    for profile in DEFAULT_DRONE_PROFILES:
        if profile.name.lower() == wanted:
            return profile
    known = ", ".join(p.name for p in DEFAULT_DRONE_PROFILES)
    raise InvalidInputError(f"Unknown drone profile '{name}'. Known profiles: {known}")

"""Build Profile Configuration.

Profiles declare the optimization and debug-info flags they control. The
default compile flags are filtered of anything a profile controls, then the
profile's own flags are appended, so there is exactly one -O level in the
final command line.

A CFLAGS override from the environment bypasses profiles entirely; see
czbuild.config.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence


class BuildProfile(Enum):
    """Build profile enum for type-safe profile selection."""

    RELEASE = "release"
    DEBUG = "debug"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProfileFlags:
    """Flags owned by one build profile.

    Attributes:
        name: Profile identifier (matches BuildProfile enum value)
        description: Human-readable profile description
        compile_flags: Compilation flags for this profile
        link_flags: Linker flags for this profile
        controlled_patterns: Flag prefixes this profile controls
    """

    name: str
    description: str
    compile_flags: tuple[str, ...]
    link_flags: tuple[str, ...]
    controlled_patterns: tuple[str, ...]


PROFILES: dict[BuildProfile, ProfileFlags] = {
    BuildProfile.RELEASE: ProfileFlags(
        name="release",
        description="Optimized build (default)",
        compile_flags=("-O2",),
        link_flags=(),
        controlled_patterns=("-O", "-g"),
    ),
    BuildProfile.DEBUG: ProfileFlags(
        name="debug",
        description="Unoptimized build with debug info",
        compile_flags=("-O0", "-g"),
        link_flags=("-g",),
        controlled_patterns=("-O", "-g"),
    ),
}


def get_profile(profile: BuildProfile) -> ProfileFlags:
    """Get profile configuration by enum."""
    return PROFILES[profile]


def filter_controlled_flags(flags: Sequence[str], profile_flags: ProfileFlags) -> List[str]:
    """Remove flags that the profile controls."""
    return [f for f in flags if not any(f.startswith(p) for p in profile_flags.controlled_patterns)]


def merge_compile_flags(base_flags: Sequence[str], profile_flags: ProfileFlags) -> List[str]:
    """Filter controlled flags out of ``base_flags`` and append the profile's compile flags."""
    return filter_controlled_flags(base_flags, profile_flags) + list(profile_flags.compile_flags)


def merge_link_flags(base_flags: Sequence[str], profile_flags: ProfileFlags) -> List[str]:
    """Filter controlled flags out of ``base_flags`` and append the profile's link flags."""
    return filter_controlled_flags(base_flags, profile_flags) + list(profile_flags.link_flags)


def format_profile_banner(profile: BuildProfile, compiler: str | None = None) -> str:
    """Format a build profile banner, e.g. ``PROFILE=release COMPILER=cc``."""
    parts = [f"PROFILE={profile.value}"]
    if compiler:
        parts.append(f"COMPILER={compiler}")
    return " ".join(parts)

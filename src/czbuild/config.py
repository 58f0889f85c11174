"""Build configuration.

This module defines:
- Toolchain: transpiler, C compiler and flags, resolved from the environment
- BuildParams: everything one build needs, resolved once by the CLI

Environment overrides:
    CZ_BIN   external transpiler run as ``$CZ_BIN <source> <output>``;
             unset means the built-in directive stripper
    CC       C compiler command (default ``cc``); may carry arguments
    CFLAGS   compile flags; replaces the defaults and the profile flags
    LDFLAGS  link flags; replaces the profile link flags
"""

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from .build.build_profiles import BuildProfile, ProfileFlags, get_profile, merge_compile_flags, merge_link_flags

ENV_TRANSPILER = "CZ_BIN"
ENV_CC = "CC"
ENV_CFLAGS = "CFLAGS"
ENV_LDFLAGS = "LDFLAGS"

DEFAULT_CC = "cc"
DEFAULT_CFLAGS = ("-std=c11", "-Wall", "-Wextra", "-Wno-unknown-pragmas")
DEFAULT_OUTPUT = "a.out"


def parse_flag_string(flag_string: str) -> List[str]:
    """Split a flag string, honoring shell quoting where it is well formed."""
    try:
        return shlex.split(flag_string)
    except ValueError:
        return flag_string.split()


@dataclass(frozen=True)
class Toolchain:
    """Commands and flags used to transpile, compile and link.

    Attributes:
        cc: C compiler command and any fixed arguments
        cflags: Flags passed when compiling each unit
        ldflags: Flags passed when linking
        transpiler: External transpiler command, or None for the built-in one
    """

    cc: tuple[str, ...]
    cflags: tuple[str, ...]
    ldflags: tuple[str, ...]
    transpiler: Optional[tuple[str, ...]] = None

    @classmethod
    def from_env(cls, profile_flags: ProfileFlags, env: Optional[Mapping[str, str]] = None) -> "Toolchain":
        """Resolve the toolchain from environment variables.

        Args:
            profile_flags: Profile whose flags apply when CFLAGS/LDFLAGS are unset
            env: Environment mapping (defaults to os.environ)
        """
        if env is None:
            env = os.environ

        cc = parse_flag_string(env.get(ENV_CC, "")) or [DEFAULT_CC]

        if ENV_CFLAGS in env:
            cflags = parse_flag_string(env[ENV_CFLAGS])
        else:
            cflags = merge_compile_flags(DEFAULT_CFLAGS, profile_flags)

        if ENV_LDFLAGS in env:
            ldflags = parse_flag_string(env[ENV_LDFLAGS])
        else:
            ldflags = merge_link_flags((), profile_flags)

        transpiler = parse_flag_string(env.get(ENV_TRANSPILER, ""))

        return cls(
            cc=tuple(cc),
            cflags=tuple(cflags),
            ldflags=tuple(ldflags),
            transpiler=tuple(transpiler) if transpiler else None,
        )

    @property
    def compiler_name(self) -> str:
        return " ".join(self.cc)


@dataclass(frozen=True)
class BuildParams:
    """Parameters of one build, passed from the CLI to the orchestrator.

    Attributes:
        root: Directory scanned for .cz units
        output: Path of the linked binary
        profile: Build profile enum value
        profile_flags: Resolved profile flags
        toolchain: Resolved toolchain
        verbose: Whether to print per-unit detail
    """

    root: Path
    output: Path
    profile: BuildProfile
    profile_flags: ProfileFlags
    toolchain: Toolchain
    verbose: bool = False

    @classmethod
    def create(
        cls,
        root: Path,
        output: Optional[Path] = None,
        profile: BuildProfile = BuildProfile.RELEASE,
        verbose: bool = False,
        env: Optional[Mapping[str, str]] = None,
    ) -> "BuildParams":
        """Create BuildParams with the toolchain and output path resolved.

        A relative output path is taken relative to ``root``.
        """
        output = Path(output) if output is not None else Path(DEFAULT_OUTPUT)
        if not output.is_absolute():
            output = root / output
        profile_flags = get_profile(profile)
        return cls(
            root=root,
            output=output,
            profile=profile,
            profile_flags=profile_flags,
            toolchain=Toolchain.from_env(profile_flags, env),
            verbose=verbose,
        )

"""Tests for build profile flag handling."""

from czbuild.build.build_profiles import (
    BuildProfile,
    filter_controlled_flags,
    format_profile_banner,
    get_profile,
    merge_compile_flags,
    merge_link_flags,
)


class TestProfiles:
    def test_release_flags(self):
        profile = get_profile(BuildProfile.RELEASE)
        assert profile.compile_flags == ("-O2",)
        assert profile.link_flags == ()

    def test_debug_flags(self):
        profile = get_profile(BuildProfile.DEBUG)
        assert profile.compile_flags == ("-O0", "-g")
        assert profile.link_flags == ("-g",)

    def test_filter_controlled_flags(self):
        profile = get_profile(BuildProfile.RELEASE)
        assert filter_controlled_flags(["-Wall", "-O3", "-g3", "-std=c11"], profile) == ["-Wall", "-std=c11"]

    def test_merge_keeps_a_single_optimization_level(self):
        flags = merge_compile_flags(["-std=c11", "-Os"], get_profile(BuildProfile.DEBUG))
        assert flags == ["-std=c11", "-O0", "-g"]

    def test_merge_link_flags(self):
        assert merge_link_flags(["-lm"], get_profile(BuildProfile.DEBUG)) == ["-lm", "-g"]

    def test_banner(self):
        assert format_profile_banner(BuildProfile.RELEASE, "cc") == "PROFILE=release COMPILER=cc"
        assert format_profile_banner(BuildProfile.DEBUG) == "PROFILE=debug"

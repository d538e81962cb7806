"""Tests for automock/plugin.py: the pytest fixture, marker and ini option."""

import pytest

from automock import OverrideRegistry, is_proxy


TUI_MODULE = """
def draw(text):
    print("drawing " + text)


def screen():
    print("screen opened")
"""


@pytest.fixture
def inner(pytester: pytest.Pytester) -> pytest.Pytester:
    """A pytester sandbox with an importable ``tuimod`` target module."""
    pytester.makepyfile(tuimod=TUI_MODULE)
    pytester.syspathinsert()
    return pytester


# ---------------------------------------------------------------------------
# In-suite usage
# ---------------------------------------------------------------------------

class TestOverrideRegistryFixture:
    """Tests for the override_registry fixture, used directly."""

    def test_yields_a_registry(self, override_registry) -> None:
        assert isinstance(override_registry, OverrideRegistry)
        assert len(override_registry) == 0

    def test_overrides_through_fixture(self, override_registry, fake_tui, capsys) -> None:
        override_registry.override_modules([fake_tui])

        fake_tui.screen().key(["esc"], print)

        assert fake_tui.screen.mock.call_count == 1
        assert capsys.readouterr().out == ""


class TestOverrideModulesMarker:
    """Tests for @pytest.mark.override_modules in this suite."""

    @pytest.mark.override_modules("fake_tui")
    def test_marker_with_import_name(self, fake_tui, override_registry) -> None:
        assert fake_tui in override_registry
        assert is_proxy(fake_tui.form)

    def test_not_overridden_without_marker(self, fake_tui) -> None:
        assert not is_proxy(fake_tui.form)


# ---------------------------------------------------------------------------
# Isolated pytest runs
# ---------------------------------------------------------------------------

class TestPluginIsolation:
    """Run small test files through pytester to check setup and teardown."""

    def test_fixture_restores_after_each_test(self, inner) -> None:
        inner.makepyfile(
            """
            import tuimod

            def test_first(override_registry):
                override_registry.override_modules([tuimod])
                tuimod.draw("x")
                assert tuimod.draw.mock.call_count == 1

            def test_second():
                assert not hasattr(tuimod.draw, "mock")
            """
        )

        result = inner.runpytest("-p", "automock.plugin")

        result.assert_outcomes(passed=2)

    def test_marker_accepts_module_objects(self, inner) -> None:
        inner.makepyfile(
            """
            import pytest
            import tuimod

            @pytest.mark.override_modules(tuimod)
            def test_marked(capsys):
                tuimod.screen()
                assert tuimod.screen.mock.call_count == 1
                assert capsys.readouterr().out == ""

            def test_unmarked():
                assert not hasattr(tuimod.screen, "mock")
            """
        )

        result = inner.runpytest("-p", "automock.plugin")

        result.assert_outcomes(passed=2)

    def test_ini_option_overrides_every_test(self, inner) -> None:
        inner.makeini(
            """
            [pytest]
            automock_modules =
                tuimod
            """
        )
        inner.makepyfile(
            """
            import tuimod

            def test_one():
                tuimod.draw("a")
                assert tuimod.draw.mock.call_count == 1

            def test_two():
                assert tuimod.draw.mock.call_count == 0
            """
        )

        result = inner.runpytest("-p", "automock.plugin")

        result.assert_outcomes(passed=2)

    def test_marker_is_registered(self, inner) -> None:
        result = inner.runpytest("-p", "automock.plugin", "--markers")

        result.stdout.fnmatch_lines(["*override_modules(*modules)*"])

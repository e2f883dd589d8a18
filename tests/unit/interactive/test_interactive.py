from unittest.mock import MagicMock, patch

import pytest
from semantic_version import Version

from cargomelos import interactive
from cargomelos.errors import PromptCancelledError


def prompt_returning(value):
    prompt = MagicMock()
    prompt.ask.return_value = value
    return prompt


def test_select_new_version_returns_choice():
    with patch("cargomelos.interactive.questionary.select") as mock_select:
        mock_select.return_value = prompt_returning(Version("1.1.0"))
        selected = interactive.select_new_version(Version("1.0.0"), "util")
        assert selected == Version("1.1.0")
        assert "for util (currently 1.0.0)" in mock_select.call_args[0][0]


def test_select_new_version_lists_bumps_then_extras():
    with patch("cargomelos.interactive.questionary.select") as mock_select:
        mock_select.return_value = prompt_returning(Version("2.0.0"))
        interactive.select_new_version(Version("1.0.0"))
        values = [c.value for c in mock_select.call_args[1]["choices"]]
        assert Version("1.0.1") in values
        assert values[-3:] == [
            interactive.SKIP,
            interactive.CUSTOM_PRERELEASE,
            interactive.CUSTOM_VERSION,
        ]


def test_select_new_version_skip():
    with patch("cargomelos.interactive.questionary.select") as mock_select:
        mock_select.return_value = prompt_returning(interactive.SKIP)
        assert interactive.select_new_version(Version("1.0.0"), "util") is None


def test_select_new_version_cancelled():
    with patch("cargomelos.interactive.questionary.select") as mock_select:
        mock_select.return_value = prompt_returning(None)
        with pytest.raises(PromptCancelledError):
            interactive.select_new_version(Version("1.0.0"))


def test_select_new_version_interrupted():
    with patch("cargomelos.interactive.questionary.select") as mock_select:
        mock_select.return_value.ask.side_effect = KeyboardInterrupt
        with pytest.raises(PromptCancelledError):
            interactive.select_new_version(Version("1.0.0"))


def test_custom_prerelease_uses_given_identifier():
    with (
        patch("cargomelos.interactive.questionary.select") as mock_select,
        patch("cargomelos.interactive.questionary.text") as mock_text,
    ):
        mock_select.return_value = prompt_returning(interactive.CUSTOM_PRERELEASE)
        selected = interactive.select_new_version(Version("3.0.0"), "util", "beta")
        assert selected == Version("3.0.1-beta.0")
        mock_text.assert_not_called()


def test_custom_prerelease_asks_for_identifier():
    with (
        patch("cargomelos.interactive.questionary.select") as mock_select,
        patch("cargomelos.interactive.questionary.text") as mock_text,
    ):
        mock_select.return_value = prompt_returning(interactive.CUSTOM_PRERELEASE)
        mock_text.return_value = prompt_returning("rc ")
        selected = interactive.select_new_version(Version("1.0.0-rc.2"))
        assert selected == Version("1.0.0-rc.3")
        assert mock_text.call_args[1]["default"] == "rc"


def test_custom_prerelease_empty_answer_uses_suggestion():
    with (
        patch("cargomelos.interactive.questionary.select") as mock_select,
        patch("cargomelos.interactive.questionary.text") as mock_text,
    ):
        mock_select.return_value = prompt_returning(interactive.CUSTOM_PRERELEASE)
        mock_text.return_value = prompt_returning("")
        assert interactive.select_new_version(Version("1.0.0")) == Version("1.0.1-alpha.0")


def test_custom_version():
    with (
        patch("cargomelos.interactive.questionary.select") as mock_select,
        patch("cargomelos.interactive.questionary.text") as mock_text,
    ):
        mock_select.return_value = prompt_returning(interactive.CUSTOM_VERSION)
        mock_text.return_value = prompt_returning("4.2.0")
        assert interactive.select_new_version(Version("1.0.0")) == Version("4.2.0")


def test_custom_version_validation():
    with (
        patch("cargomelos.interactive.questionary.select") as mock_select,
        patch("cargomelos.interactive.questionary.text") as mock_text,
    ):
        mock_select.return_value = prompt_returning(interactive.CUSTOM_VERSION)
        mock_text.return_value = prompt_returning("4.2.0")
        interactive.select_new_version(Version("1.0.0"))
        validate = mock_text.call_args[1]["validate"]
        assert validate("1.2.3") is True
        assert validate("not-a-version") == "Not a valid semantic version"


def test_confirm():
    with patch("cargomelos.interactive.questionary.confirm") as mock_confirm:
        mock_confirm.return_value = prompt_returning(True)
        assert interactive.confirm("Go?") is True
        assert mock_confirm.call_args[1]["default"] is False


def test_confirm_interrupted_is_no():
    with patch("cargomelos.interactive.questionary.confirm") as mock_confirm:
        mock_confirm.return_value.ask.side_effect = KeyboardInterrupt
        assert interactive.confirm("Go?", default=True) is False

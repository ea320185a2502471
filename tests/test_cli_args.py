"""Tests for CLI argument parsing and handling."""

import argparse
from io import StringIO
from unittest.mock import patch

import pytest

from channel_speech.main import cli_entry_with_args, create_argument_parser, handle_arguments


@pytest.mark.unit
class TestArgumentParser:
    """Test cases for create_argument_parser."""

    def test_path_is_required(self) -> None:
        """Test the recording path must be given."""
        parser = create_argument_parser()

        with patch("sys.stderr", new_callable=StringIO):
            with pytest.raises(SystemExit) as exc_info:
                parser.parse_args([])

        assert exc_info.value.code != 0

    def test_defaults(self) -> None:
        """Test parsing with only a path."""
        parser = create_argument_parser()

        args = parser.parse_args(["utterance.wav"])
        assert args.path == "utterance.wav"
        assert args.key is None
        assert args.verbose is False
        assert args.trace is False
        assert args.no_confidence is False

    def test_combined_arguments(self) -> None:
        """Test parsing multiple arguments together."""
        parser = create_argument_parser()

        args = parser.parse_args(
            ["utterance.wav", "--key", "secret", "-v", "--trace", "--no-confidence"]
        )
        assert args.key == "secret"
        assert args.verbose is True
        assert args.trace is True
        assert args.no_confidence is True

    def test_argument_descriptions(self) -> None:
        """Test that arguments have proper descriptions."""
        parser = create_argument_parser()

        with patch("sys.stdout", new_callable=StringIO) as mock_stdout:
            with pytest.raises(SystemExit):
                parser.parse_args(["--help"])

        help_output = mock_stdout.getvalue()
        assert "Recognition service API key" in help_output
        assert "GOOGLE_SPEECH_API_KEY" in help_output
        assert "Enable trace logging" in help_output


@pytest.mark.unit
class TestHandleArguments:
    """Test cases for handle_arguments."""

    def _args(self, **overrides) -> argparse.Namespace:
        values = {
            "path": "utterance.wav",
            "key": None,
            "verbose": False,
            "trace": False,
            "no_confidence": False,
        }
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_explicit_key_wins(self, monkeypatch) -> None:
        """Test --key takes precedence over the environment."""
        monkeypatch.setenv("GOOGLE_SPEECH_API_KEY", "from-env")

        with patch("channel_speech.main.configure_logging"):
            assert handle_arguments(self._args(key="from-flag")) == "from-flag"

    def test_key_from_environment(self, monkeypatch) -> None:
        """Test the key falls back to the environment."""
        monkeypatch.setenv("GOOGLE_SPEECH_API_KEY", "from-env")

        with patch("channel_speech.main.configure_logging"):
            assert handle_arguments(self._args()) == "from-env"

    def test_missing_key(self, monkeypatch) -> None:
        """Test a missing key is reported."""
        monkeypatch.delenv("GOOGLE_SPEECH_API_KEY", raising=False)

        with patch("channel_speech.main.configure_logging"):
            with patch("builtins.print") as mock_print:
                assert handle_arguments(self._args()) is None

        assert "GOOGLE_SPEECH_API_KEY" in mock_print.call_args.args[0]

    def test_logging_flags_are_applied(self, monkeypatch) -> None:
        """Test verbose and trace flags configure logging."""
        monkeypatch.setenv("GOOGLE_SPEECH_API_KEY", "from-env")

        with patch("channel_speech.main.configure_logging") as mock_configure:
            handle_arguments(self._args(verbose=True, trace=True))

        mock_configure.assert_called_once_with(verbose=True, trace=True)


@pytest.mark.unit
class TestCliEntry:
    """Test cases for cli_entry_with_args."""

    def test_exit_code_without_key(self, monkeypatch) -> None:
        """Test the process exits with 1 when no key is available."""
        monkeypatch.delenv("GOOGLE_SPEECH_API_KEY", raising=False)
        monkeypatch.setattr("sys.argv", ["channel-speech", "utterance.wav"])

        with patch("channel_speech.main.configure_logging"):
            with patch("builtins.print"):
                with pytest.raises(SystemExit) as exc_info:
                    cli_entry_with_args()

        assert exc_info.value.code == 1

    def test_exit_code_reflects_result(self, monkeypatch) -> None:
        """Test the process exit code follows the transcription result."""
        monkeypatch.setattr("sys.argv", ["channel-speech", "utterance.wav", "--key", "k"])

        async def fake_main(path, key, show_confidence_percentage=True):
            return True

        with patch("channel_speech.main.configure_logging"):
            with patch("channel_speech.main.main", new=fake_main):
                with pytest.raises(SystemExit) as exc_info:
                    cli_entry_with_args()

        assert exc_info.value.code == 0

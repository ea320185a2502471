"""Command-line interface for transcribing recorded voice channel audio."""

import argparse
import asyncio
import os
import sys
import wave
from pathlib import Path

from .speech_to_text.audio_conversion import get_duration_seconds, stereo_to_mono
from .speech_to_text.config import API_KEY_ENV_VAR, BYTES_PER_SAMPLE, CHANNELS, SAMPLE_RATE
from .speech_to_text.exceptions import AudioFileError, SpeechError
from .speech_to_text.logging_utils import configure_logging, get_logger
from .speech_to_text.models import RecognitionResponse
from .speech_to_text.recognition import recognize_speech

logger = get_logger(__name__)


def read_stereo_wav(path: str | Path) -> bytes:
    """
    Read the PCM frames of a 48kHz 16-bit stereo WAV file.

    Args:
        path: Path to the WAV file

    Returns:
        Interleaved stereo PCM bytes

    Raises:
        AudioFileError: If the file can't be read or has another format
    """
    try:
        with wave.open(str(path), "rb") as wav_file:
            channels = wav_file.getnchannels()
            sample_width = wav_file.getsampwidth()
            frame_rate = wav_file.getframerate()
            frames = wav_file.readframes(wav_file.getnframes())
    except (OSError, EOFError, wave.Error) as e:
        raise AudioFileError(f"Could not read {path}: {e}") from e

    if (channels, sample_width, frame_rate) != (CHANNELS, BYTES_PER_SAMPLE, SAMPLE_RATE):
        raise AudioFileError(
            f"{path} is {channels}ch/{sample_width * 8}bit/{frame_rate}Hz, "
            f"expected {CHANNELS}ch/{BYTES_PER_SAMPLE * 8}bit/{SAMPLE_RATE}Hz"
        )
    if not frames:
        raise AudioFileError(f"{path} contains no audio")

    return frames


class SpeechToTextCLI:
    """Command-line interface for recognizing recorded utterances."""

    def __init__(self, key: str, show_confidence_percentage: bool = True) -> None:
        """
        Initialize the CLI.

        Args:
            key: API key for the recognition service
            show_confidence_percentage: Whether to show confidence percentages in output
        """
        self._key = key
        self._show_confidence_percentage = show_confidence_percentage

    async def transcribe_file(self, path: str | Path) -> RecognitionResponse:
        """
        Downmix a stereo recording and send it for recognition.

        Raises:
            AudioFileError: If the file can't be used
            SpeechError: If recognition fails
        """
        mono_buffer = stereo_to_mono(read_stereo_wav(path))
        logger.debug(
            f"Loaded {get_duration_seconds(mono_buffer):.2f}s of audio from {path}"
        )
        return await recognize_speech(self._key, mono_buffer)

    def print_response(self, response: RecognitionResponse) -> None:
        """Print the transcript of a recognition response."""
        if not response.transcript:
            print("🔇 No speech recognized.")
            return

        if self._show_confidence_percentage:
            confidence_percent = round(response.confidence * 100)
            print(f"{response.transcript} ({confidence_percent}%)")
        else:
            print(response.transcript)

    async def run(self, path: str | Path) -> bool:
        """
        Transcribe one file and print the result.

        Returns:
            True if the file was transcribed, False otherwise
        """
        try:
            response = await self.transcribe_file(path)
        except AudioFileError as e:
            print(f"❌ {e}")
            return False
        except SpeechError as e:
            print(f"❌ Recognition failed ({e.code.value}): {e.error}")
            return False

        self.print_response(response)
        return True


async def main(path: str, key: str, show_confidence_percentage: bool = True) -> bool:
    """Main entry point for the CLI application."""
    cli = SpeechToTextCLI(key, show_confidence_percentage=show_confidence_percentage)
    return await cli.run(path)


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description="Channel Speech CLI - Transcribe a recorded voice channel utterance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  python -m channel_speech.main utterance.wav                 # Key from ${API_KEY_ENV_VAR}
  python -m channel_speech.main utterance.wav --key KEY       # Explicit key
  python -m channel_speech.main utterance.wav --no-confidence # Hide confidence %
  python -m channel_speech.main utterance.wav --trace         # Enable trace logging

The file must be 48kHz 16-bit stereo PCM, the format voice channels are decoded to.
        """,
    )

    parser.add_argument(
        "path",
        metavar="PATH",
        help="WAV file to transcribe",
    )

    parser.add_argument(
        "--key",
        type=str,
        default=None,
        help=f"Recognition service API key (default: ${API_KEY_ENV_VAR})",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging and debug information",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable trace logging (most verbose, includes all debug info)",
    )

    parser.add_argument(
        "--no-confidence",
        action="store_true",
        help="Hide confidence percentages in transcription output",
    )

    return parser


def handle_arguments(args: argparse.Namespace) -> str | None:
    """
    Configure logging and resolve the API key from parsed arguments.

    Args:
        args: Parsed arguments from argparse

    Returns:
        The API key, or None if none was given
    """
    configure_logging(verbose=args.verbose, trace=args.trace)

    key = args.key or os.environ.get(API_KEY_ENV_VAR)
    if not key:
        print(f"❌ No API key given. Use --key or set {API_KEY_ENV_VAR}.")
        return None

    return key


def cli_entry_with_args() -> None:
    """CLI entry point with argument parsing."""
    parser = create_argument_parser()

    try:
        args = parser.parse_args()

        key = handle_arguments(args)
        if key is None:
            sys.exit(1)

        success = asyncio.run(
            main(args.path, key, show_confidence_percentage=not args.no_confidence)
        )
        sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        pass
    except SystemExit:
        # Re-raise SystemExit (from argparse help, etc.)
        raise
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli_entry_with_args()

from jukebox.config import PlayerConfig
from .base_sink import BaseSink
from .null_sink import NullSink
from .wav_sink import WavFileSink


def create_output_sink(config: PlayerConfig) -> BaseSink:
    """
    Create an output sink based on configuration.

    Modes:
        null: discard audio (default)
        wav: write a WAV file to config.output_path

    Returns:
        BaseSink instance configured according to config.output_mode
    """
    mode = config.output_mode.lower()

    if mode == "wav":
        if not config.output_path:
            raise ValueError("Output path is required for wav output")
        return WavFileSink(config.output_path, sample_rate=config.sample_rate, channels=config.channels)

    if mode != "null":
        raise ValueError(f"Unknown output mode: {config.output_mode}")

    # Default: discard audio, player logic still runs
    return NullSink()

from .base_sink import BaseSink


class NullSink(BaseSink):
    """
    Drops every frame.

    Default output mode: the player and pump keep their real-time cadence
    with nowhere to send audio, e.g. when only the event log matters.
    """

    def write(self, frame: bytes) -> None:
        pass

    def close(self) -> None:
        pass

"""
Lazy video frame decoding

FrameStream drives a packet-based decoder through three states:

    DECODING --(no packets remain, EOF sent)--> FLUSHING
    FLUSHING --(decoder yields no frame)------> DONE

Decoder failures are yielded in place of a frame as DecodeError
instances, so a consumer can count them and keep iterating.
"""

from collections import deque
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Protocol, Union

import numpy as np

try:
    import cv2
except ImportError:
    cv2 = None

from stegascan.core.dependencies import require_dependency
from stegascan.core.exceptions import DecodeError
from stegascan.core.logging import get_logger

logger = get_logger()

DEFAULT_PACKET_BUFFER = 10


class StreamState(Enum):
    DECODING = "decoding"
    FLUSHING = "flushing"
    DONE = "done"


class VideoDecoder(Protocol):
    def send_packet(self, packet: Any) -> None:
        ...

    def receive_frame(self) -> Optional[np.ndarray]:
        ...

    def send_eof(self) -> None:
        ...


class FrameStream:
    """Single-pass iterator of RGBA frames or DecodeError items"""

    def __init__(
        self,
        packets: Iterable[Any],
        decoder: VideoDecoder,
        codec: str = "video",
        buffer_size: int = DEFAULT_PACKET_BUFFER,
    ):
        self._packets = iter(packets)
        self._buffer = deque()
        self._buffer_size = buffer_size
        self._skip_receive = False
        self.decoder = decoder
        self.codec = codec
        self.state = StreamState.DECODING

    def __iter__(self) -> Iterator[Union[np.ndarray, DecodeError]]:
        return self

    def __next__(self) -> Union[np.ndarray, DecodeError]:
        while self.state is not StreamState.DONE:
            if self._skip_receive:
                self._skip_receive = False
            else:
                try:
                    frame = self.decoder.receive_frame()
                except Exception as e:
                    self._skip_receive = True
                    return self._failure("receive_frame", e)

                if frame is not None:
                    return frame

            if self.state is StreamState.FLUSHING:
                self._transition(StreamState.DONE)
                break

            error = self._feed()
            if error is not None:
                return error

        raise StopIteration

    def _feed(self) -> Optional[DecodeError]:
        if not self._buffer:
            self._load_packets()

        if not self._buffer:
            self._transition(StreamState.FLUSHING)
            try:
                self.decoder.send_eof()
            except Exception as e:
                return self._failure("send_eof", e)
            return None

        packet = self._buffer.popleft()
        try:
            self.decoder.send_packet(packet)
        except Exception as e:
            self._skip_receive = True
            return self._failure("send_packet", e)
        return None

    def _load_packets(self):
        for packet in self._packets:
            self._buffer.append(packet)
            if len(self._buffer) >= self._buffer_size:
                break

    def _transition(self, state: StreamState):
        logger.debug(f"Frame stream {self.state.value} -> {state.value}")
        self.state = state

    def _failure(self, step: str, error: Exception) -> DecodeError:
        if isinstance(error, DecodeError):
            return error
        return DecodeError(f"{step} failed: {error}", codec=self.codec, cause=error)


class OpenCVDecoder:
    """
    VideoDecoder over cv2.VideoCapture

    Packets are grabbed frame positions; send_packet retrieves and
    converts the grabbed frame to RGBA. A capture only holds the most
    recent grab, so the stream must buffer a single packet.
    """

    def __init__(self, capture):
        self.capture = capture
        self._pending = deque()

    def packets(self) -> Iterator[int]:
        position = 0
        while self.capture.grab():
            yield position
            position += 1

    def send_packet(self, packet: int) -> None:
        ok, frame = self.capture.retrieve()
        if not ok or frame is None:
            raise DecodeError(f"could not retrieve frame {packet}", codec="opencv")
        self._pending.append(self._to_rgba(frame))

    def receive_frame(self) -> Optional[np.ndarray]:
        if self._pending:
            return self._pending.popleft()
        return None

    def send_eof(self) -> None:
        self.capture.release()

    @staticmethod
    def _to_rgba(frame: np.ndarray) -> np.ndarray:
        if frame.ndim == 2:
            return cv2.cvtColor(frame, cv2.COLOR_GRAY2RGBA)
        if frame.shape[2] == 4:
            return cv2.cvtColor(frame, cv2.COLOR_BGRA2RGBA)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGBA)


def open_video(path: Union[str, Path]) -> FrameStream:
    """Open a video file as a lazy FrameStream backed by OpenCV"""
    require_dependency("opencv-python-headless", "Video frame sampling")

    capture = cv2.VideoCapture(str(path))
    if not capture.isOpened():
        capture.release()
        raise DecodeError(f"could not open {path}", codec="opencv")

    decoder = OpenCVDecoder(capture)
    return FrameStream(decoder.packets(), decoder, codec="opencv", buffer_size=1)

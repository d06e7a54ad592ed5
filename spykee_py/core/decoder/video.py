"""
spykee_py/core/decoder/video.py

JPEG video frame decoding using PyAV.

The robot sends each video frame as a complete JPEG still. This module
decodes those payloads into RGB numpy arrays for frame callbacks.
"""

import logging
from typing import Optional

import av
import numpy as np

from .exceptions import DecodeError, DecoderInitializationError


logger = logging.getLogger(__name__)


__all__ = ['JpegFrameDecoder']


class JpegFrameDecoder:
    """
    Decodes JPEG stills from the video stream into RGB arrays.

    Example:
        >>> decoder = JpegFrameDecoder()
        >>> image = decoder.decode(video_frame.data)
        >>> image.shape
        (240, 320, 3)
    """

    CODEC_NAME = "mjpeg"

    def __init__(self):
        """
        Initialize the decoder.

        Raises:
            DecoderInitializationError: If the MJPEG decoder is unavailable
        """
        try:
            self._codec_context = av.CodecContext.create(self.CODEC_NAME, "r")
        except Exception as e:
            raise DecoderInitializationError(
                f"Failed to create {self.CODEC_NAME} decoder: {e}"
            )
        self._frame_count = 0
        self._error_count = 0

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def decode(self, data: bytes) -> Optional[np.ndarray]:
        """
        Decode one JPEG frame.

        Args:
            data: Compressed frame bytes

        Returns:
            RGB array of shape (height, width, 3), or None if the decoder
            produced no picture for this packet

        Raises:
            DecodeError: If the data cannot be decoded
        """
        if not data:
            raise DecodeError("Empty video frame")

        try:
            frames = self._codec_context.decode(av.Packet(bytes(data)))
        except av.error.FFmpegError as e:
            self._error_count += 1
            raise DecodeError(f"Failed to decode frame: {e}")

        image = None
        for frame in frames:
            # PyAV reuses frame buffers, so the array must be copied
            image = frame.to_ndarray(format="rgb24").copy()
            self._frame_count += 1

        if image is None:
            logger.debug(f"No picture decoded from {len(data)} byte frame")
        return image

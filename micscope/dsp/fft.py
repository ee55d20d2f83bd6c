"""Radix-2 FFT for real input frames.

A real frame of ``N`` samples is packed into ``N/2`` complex samples
(``z[k] = x[2k] + i*x[2k+1]``), transformed with an iterative
decimation-in-time FFT of length ``N/2`` and then split back into the
spectrum of the real sequence:

    E[k] = (Z[k] + conj(Z[N/2-k])) / 2
    O[k] = (Z[k] - conj(Z[N/2-k])) / 2i
    X[k] = E[k] + exp(-2*pi*i*k/N) * O[k]

All tables are built once per frame size. Arithmetic is single precision.
"""

import logging
from typing import Optional

import numpy as np

from ..config.session import ConfigurationError, is_power_of_two

logger = logging.getLogger(__name__)


def bit_reversal_indices(length: int) -> np.ndarray:
    """Return the bit-reversed permutation of ``range(length)``."""
    bits = length.bit_length() - 1
    indices = np.arange(length)
    reversed_indices = np.zeros(length, dtype=np.intp)
    for bit in range(bits):
        reversed_indices |= ((indices >> bit) & 1) << (bits - 1 - bit)
    return reversed_indices


def _readonly(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


class RealFFT:
    """Forward FFT of real ``frame_size`` frames into ``frame_size/2`` bins."""

    def __init__(self, frame_size: int):
        if not is_power_of_two(frame_size) or frame_size < 2:
            raise ConfigurationError(f"FFT size must be a power of two >= 2, got {frame_size!r}")

        self.frame_size = frame_size
        self.half_size = half = frame_size // 2

        self._bit_reversal = _readonly(bit_reversal_indices(half))
        self._mirror = _readonly((-np.arange(half)) % half)

        # One twiddle table per butterfly stage: exp(-2*pi*i*k/size), k < size/2
        self._stage_twiddles = []
        size = 2
        while size <= half:
            k = np.arange(size // 2)
            self._stage_twiddles.append(
                _readonly(np.exp(-2j * np.pi * k / size).astype(np.complex64)))
            size *= 2

        k = np.arange(half)
        self._split_twiddles = _readonly(np.exp(-2j * np.pi * k / frame_size).astype(np.complex64))

        # Scratch space, O(N) in total
        self._work = np.empty(half, dtype=np.complex64)
        self._butterfly = np.empty(max(half // 2, 1), dtype=np.complex64)
        self._mirrored = np.empty(half, dtype=np.complex64)
        self._odd = np.empty(half, dtype=np.complex64)

        logger.debug(f"FFT setup built for frame size {frame_size} "
                     f"({len(self._stage_twiddles)} butterfly stages)")

    def _pack(self, frame: np.ndarray) -> np.ndarray:
        x = np.asarray(frame, dtype=np.float32)
        if x.shape != (self.frame_size,):
            raise ValueError(f"Expected a frame of {self.frame_size} samples, got shape {x.shape}")

        z = self._work
        z.real[:] = x[0::2][self._bit_reversal]
        z.imag[:] = x[1::2][self._bit_reversal]
        return z

    def _butterflies(self, z: np.ndarray) -> None:
        for twiddles in self._stage_twiddles:
            half = twiddles.size
            blocks = z.reshape(-1, 2 * half)
            top = blocks[:, :half]
            bottom = blocks[:, half:]
            product = self._butterfly.reshape(bottom.shape)
            np.multiply(bottom, twiddles, out=product)
            np.subtract(top, product, out=bottom)
            top += product

    def _transform(self, frame: np.ndarray) -> np.ndarray:
        z = self._pack(frame)
        self._butterflies(z)
        return z

    def forward(self, frame: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
        """Transform a real frame into ``frame_size/2`` complex64 bins.

        Bin 0 holds the DC term. The Nyquist term is left out; see
        :meth:`forward_full` for it.

        Args:
            frame: ``frame_size`` real samples
            out: Optional complex64 array of ``frame_size/2`` to write into

        Returns:
            The complex spectrum, ``out`` if it was given
        """
        z = self._transform(frame)

        mirrored = np.take(z, self._mirror, out=self._mirrored)
        np.conjugate(mirrored, out=mirrored)

        odd = np.subtract(z, mirrored, out=self._odd)
        odd *= np.complex64(-0.5j)
        odd *= self._split_twiddles

        if out is None:
            out = np.empty(self.half_size, dtype=np.complex64)
        np.add(z, mirrored, out=out)
        out *= np.float32(0.5)
        out += odd
        return out

    def forward_full(self, frame: np.ndarray) -> np.ndarray:
        """Return all ``frame_size/2 + 1`` bins, Nyquist included."""
        bins = self.forward(frame)
        z0 = self._work[0]
        nyquist = np.complex64(z0.real - z0.imag)
        return np.append(bins, nyquist).astype(np.complex64)

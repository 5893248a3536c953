# audio.py
"""
Audio sources for the audio-reactive modes.

An audio source exposes two non-blocking polls:
    sample_energy() -> float in [0, 1]
    sample_spectrum() -> np.ndarray of floats in [0, 1], one per frequency bin

SpectrumAnalyser turns the most recently captured block of samples into a
normalised magnitude spectrum the way a browser AnalyserNode does (Blackman
window, decibel scaling between fixed floor and ceiling, exponential
smoothing between captured blocks). Whatever captures audio hands blocks over with
push_samples(); capturing from a device is left to the host.

SimulatedAudioSource synthesises a deterministic tone mix so the
audio-reactive paths can be exercised without any device.
"""
import logging
import math
import threading
import numpy as np
from typing import Optional

from constants import FPS


def _clamp01(x: float) -> float:
    if x < 0.0: return 0.0
    if x > 1.0: return 1.0
    return x


class SpectrumAnalyser:
    """
    Normalised magnitude spectrum of the latest `fft_size` samples.

    Thread-safe hand-off: push_samples() may be called from a capture thread
    while the render thread polls. Polls never wait for new data.
    """
    def __init__(self, fft_size: int = 256, smoothing: float = 0.8,
                 min_decibels: float = -100.0, max_decibels: float = -30.0):
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError(f"fft_size must be a power of two >= 32, got {fft_size}.")
        if not min_decibels < max_decibels:
            raise ValueError("min_decibels must be below max_decibels.")

        self.fft_size = fft_size
        self.bin_count = fft_size // 2
        self.smoothing = min(max(float(smoothing), 0.0), 0.99)
        self.min_decibels = float(min_decibels)
        self.max_decibels = float(max_decibels)

        self._window = np.blackman(fft_size)
        self._buffer = np.zeros(fft_size, dtype=np.float64)
        self._previous = np.zeros(self.bin_count, dtype=np.float64)
        self._spectrum = np.zeros(self.bin_count, dtype=np.float64)
        self._stale = False
        self._lock = threading.Lock()

    def push_samples(self, samples) -> None:
        """Appends captured mono samples in [-1, 1]; only the newest fft_size are kept."""
        block = np.asarray(samples, dtype=np.float64).ravel()
        if block.size == 0:
            return
        with self._lock:
            if block.size >= self.fft_size:
                self._buffer = block[-self.fft_size:].copy()
            else:
                self._buffer = np.concatenate((self._buffer[block.size:], block))
            self._stale = True

    def _analyse(self, block: np.ndarray) -> np.ndarray:
        """FFT, smoothing against the previous block, then decibel scaling."""
        magnitude = np.abs(np.fft.rfft(block * self._window))[:self.bin_count] / self.fft_size
        smoothed = self.smoothing * self._previous + (1.0 - self.smoothing) * magnitude
        self._previous = smoothed

        decibels = 20.0 * np.log10(np.maximum(smoothed, 1e-12))
        scaled = (decibels - self.min_decibels) / (self.max_decibels - self.min_decibels)
        return np.clip(scaled, 0.0, 1.0)

    def sample_spectrum(self) -> np.ndarray:
        """
        Spectrum of the latest block. Each pushed block is analysed once, on
        the first poll after it arrives; later polls return the same values.
        """
        with self._lock:
            if self._stale:
                self._spectrum = self._analyse(self._buffer.copy())
                self._stale = False
            return self._spectrum.copy()

    def sample_energy(self) -> float:
        """Average normalised magnitude over all bins."""
        return _clamp01(float(np.mean(self.sample_spectrum())))


class SimulatedAudioSource:
    """
    Deterministic synthetic audio feeding a SpectrumAnalyser.

    Each sample_energy() call advances the synthetic clock by one frame and
    pushes a fresh block, so energy and spectrum follow the frame rate.
    """
    # (carrier Hz, modulation Hz, phase) per voice
    VOICES = (
        (110.0, 0.33, 0.0),
        (440.0, 0.51, 0.6),
        (1760.0, 0.73, 1.2),
        (5200.0, 1.10, 1.8),
    )

    def __init__(self, sample_rate: int = 44100, fft_size: int = 256,
                 frame_rate: float = FPS, analyser: Optional[SpectrumAnalyser] = None):
        self.sample_rate = sample_rate
        self.frame_duration = 1.0 / float(frame_rate)
        self.analyser = analyser if analyser is not None else SpectrumAnalyser(fft_size)
        self.time = 0.0
        logging.info(
            f"Simulated audio source attached ({sample_rate} Hz, "
            f"{self.analyser.bin_count} bins)."
        )

    def _synthesize(self, t0: float) -> np.ndarray:
        n = self.analyser.fft_size
        t = t0 + np.arange(n) / self.sample_rate
        signal = np.zeros(n, dtype=np.float64)
        for carrier, modulation, phase in self.VOICES:
            amplitude = 0.5 + 0.5 * math.sin(2.0 * math.pi * modulation * t0 + phase)
            signal += amplitude * np.sin(2.0 * math.pi * carrier * t)
        return signal / len(self.VOICES)

    def sample_energy(self) -> float:
        self.analyser.push_samples(self._synthesize(self.time))
        self.time += self.frame_duration
        return self.analyser.sample_energy()

    def sample_spectrum(self) -> np.ndarray:
        return self.analyser.sample_spectrum()


def create_audio_source(audio_config: dict):
    """
    Builds the audio source named in the "audio" config section.

    Returns None when no source is configured, which the frame driver treats
    exactly like audio being disabled.
    """
    source = (audio_config or {}).get('source')
    if source is None:
        logging.info("No audio source configured. Audio reactivity disabled.")
        return None
    if source == 'simulated':
        return SimulatedAudioSource(
            fft_size=int(audio_config.get('fft_size', 256)),
        )
    msg = f"Configuration error: unknown audio source '{source}'. Expected null or 'simulated'."
    logging.critical(msg)
    raise ValueError(msg)

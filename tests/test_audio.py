import numpy as np
import pytest

from audio import SpectrumAnalyser, SimulatedAudioSource, create_audio_source


def tone(frequency, sample_rate=44100, n=256, amplitude=0.8):
    t = np.arange(n) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


def test_silence_is_zero():
    analyser = SpectrumAnalyser()
    spectrum = analyser.sample_spectrum()
    assert spectrum.shape == (128,)
    assert np.all(spectrum == 0.0)
    assert analyser.sample_energy() == 0.0


def test_tone_peaks_in_its_bin():
    analyser = SpectrumAnalyser(smoothing=0.0)
    # Bin width is 44100 / 256 Hz.
    analyser.push_samples(tone(20 * 44100 / 256, amplitude=0.05))
    spectrum = analyser.sample_spectrum()
    assert int(np.argmax(spectrum)) == 20
    assert np.all((spectrum >= 0.0) & (spectrum <= 1.0))


def test_repeated_polls_return_the_same_spectrum():
    analyser = SpectrumAnalyser(smoothing=0.8)
    analyser.push_samples(tone(3000, amplitude=0.05))
    first = analyser.sample_spectrum()
    second = analyser.sample_spectrum()
    np.testing.assert_array_equal(first, second)
    assert analyser.sample_energy() == pytest.approx(float(np.mean(first)))


def test_smoothing_carries_over_between_blocks():
    analyser = SpectrumAnalyser(smoothing=0.8)
    analyser.push_samples(tone(3000, amplitude=0.05))
    first = analyser.sample_spectrum()
    analyser.push_samples(tone(3000, amplitude=0.05))
    second = analyser.sample_spectrum()
    assert second.max() > first.max()


def test_returned_spectrum_is_a_copy():
    analyser = SpectrumAnalyser()
    analyser.push_samples(tone(1000, amplitude=0.05))
    spectrum = analyser.sample_spectrum()
    spectrum[:] = 7.0
    assert analyser.sample_spectrum().max() <= 1.0


def test_simulated_energy_matches_spectrum_of_the_same_frame():
    source = SimulatedAudioSource()
    for _ in range(3):
        energy = source.sample_energy()
        spectrum = source.sample_spectrum()
        assert energy == pytest.approx(float(np.mean(spectrum)))


def test_push_keeps_only_latest_window():
    analyser = SpectrumAnalyser(fft_size=64)
    analyser.push_samples(np.ones(1000))
    analyser.push_samples(np.zeros(32))
    assert np.count_nonzero(analyser._buffer) == 32
    analyser.push_samples([])
    assert analyser._buffer.shape == (64,)


def test_rejects_bad_fft_size():
    with pytest.raises(ValueError):
        SpectrumAnalyser(fft_size=100)


def test_simulated_source_is_deterministic_and_bounded():
    a = SimulatedAudioSource()
    b = SimulatedAudioSource()
    energies_a = [a.sample_energy() for _ in range(30)]
    energies_b = [b.sample_energy() for _ in range(30)]
    assert energies_a == energies_b
    assert all(0.0 <= e <= 1.0 for e in energies_a)
    assert max(energies_a) > 0.0
    assert len(a.sample_spectrum()) == 128


def test_factory():
    assert create_audio_source({"source": None}) is None
    assert create_audio_source({}) is None
    assert isinstance(create_audio_source({"source": "simulated"}), SimulatedAudioSource)
    with pytest.raises(ValueError):
        create_audio_source({"source": "microphone"})

"""AudioSignal: question tones and answer feedback sounds."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import librosa
import numpy as np

from staffmaster.logging_utils import log_event
from staffmaster.quiz_models import Pitch

logger = logging.getLogger(__name__)

#: A major triad on A4 (A4, C#5, E5), sounded together by the sound check.
SOUND_CHECK_HZ: tuple[float, ...] = (440.0, 554.0, 659.0)


class AudioSignal(ABC):
    """Fire-and-forget sound output. Implementations must not block."""

    @abstractmethod
    def play_question_tone(self, pitch: Pitch) -> None:
        """Sound the note that is on the staff."""

    @abstractmethod
    def play_feedback(self, correct: bool) -> None:
        """Sound a chime for a right answer or a buzz for a wrong one."""


class SilentAudio(AudioSignal):
    """Plays nothing. Used for muted games and tests."""

    def play_question_tone(self, pitch: Pitch) -> None:
        pass

    def play_feedback(self, correct: bool) -> None:
        pass


def exponential_decay(n_samples: int, start: float = 0.3, end: float = 0.001) -> np.ndarray:
    """Gain envelope falling exponentially from *start* to *end*."""
    if n_samples <= 0:
        return np.zeros(0)
    return start * np.geomspace(1.0, end / start, num=n_samples)


def triangle_wave(cycles: np.ndarray) -> np.ndarray:
    """Unit triangle wave for a phase given in cycles; starts at 0 and rises."""
    return 1.0 - 4.0 * np.abs(np.mod(cycles + 0.25, 1.0) - 0.5)


def sweep_frequencies(f_start: float, f_end: float, sweep_s: float, total_s: float, sr: int) -> np.ndarray:
    """
    Instantaneous frequency per sample: an exponential glide from *f_start*
    to *f_end* over *sweep_s*, then held at *f_end* until *total_s*.
    """
    n_sweep = int(round(sweep_s * sr))
    n_total = max(int(round(total_s * sr)), n_sweep)
    glide = np.geomspace(f_start, f_end, num=n_sweep) if n_sweep else np.zeros(0)
    return np.concatenate([glide, np.full(n_total - n_sweep, f_end)])


class ToneAudio(AudioSignal):
    """
    Synthesizes every sound in memory and plays it through sounddevice.

    Sounds
    ------
    Question tone  : triangle at the note's frequency, 1.5 s, exponential decay
                     from 0.3 to 0.001, after a 0.5 s lead-in so it follows
                     the staff drawing.
    Correct chime  : sine gliding 500 → 1000 Hz in 0.1 s, 0.5 s long.
    Wrong buzz     : sawtooth gliding 150 → 100 Hz in 0.2 s, 0.4 s long.
    Sound check    : sines at 440, 554 and 659 Hz started together, 1.5 s.

    Playback failures (no device, missing PortAudio) are logged once and the
    instance goes quiet; the game carries on without sound.
    """

    SAMPLE_RATE = 22050
    TONE_DURATION_S = 1.5
    LEAD_IN_S = 0.5

    def __init__(self, sample_rate: int = SAMPLE_RATE, lead_in_s: float = LEAD_IN_S) -> None:
        self.sample_rate = sample_rate
        self.lead_in_s = lead_in_s
        self.available = True

    # ------------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------------

    def frequency_for(self, pitch: Pitch) -> float:
        return float(librosa.note_to_hz(str(pitch)))

    def question_tone(self, pitch: Pitch) -> np.ndarray:
        n_tone = int(self.TONE_DURATION_S * self.sample_rate)
        cycles = self.frequency_for(pitch) * np.arange(n_tone) / self.sample_rate
        tone = triangle_wave(cycles) * exponential_decay(n_tone)
        lead_in = np.zeros(int(round(self.lead_in_s * self.sample_rate)))
        return np.concatenate([lead_in, tone]).astype(np.float32)

    def feedback_sound(self, correct: bool) -> np.ndarray:
        if correct:
            freqs = sweep_frequencies(500.0, 1000.0, 0.1, 0.5, self.sample_rate)
        else:
            freqs = sweep_frequencies(150.0, 100.0, 0.2, 0.4, self.sample_rate)

        phase = 2.0 * np.pi * np.cumsum(freqs) / self.sample_rate
        if correct:
            wave = np.sin(phase)
        else:
            cycles = phase / (2.0 * np.pi)
            wave = 2.0 * (cycles - np.floor(cycles + 0.5))
        return (wave * exponential_decay(len(wave))).astype(np.float32)

    def sound_check_chord(self, frequencies: tuple[float, ...] = SOUND_CHECK_HZ) -> np.ndarray:
        """Decaying sine tones that all start together; used by the sound check."""
        n_tone = int(round(self.TONE_DURATION_S * self.sample_rate))
        envelope = exponential_decay(n_tone)
        mix = np.zeros(n_tone)
        for freq in frequencies:
            mix += librosa.tone(freq, sr=self.sample_rate, length=n_tone) * envelope
        peak = float(np.max(np.abs(mix))) or 1.0
        return (mix * min(1.0, 0.9 / peak)).astype(np.float32)

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def _play(self, samples: np.ndarray) -> None:
        if not self.available:
            return
        try:
            import sounddevice as sd
        except (ImportError, OSError) as exc:
            self._disable(exc)
            return
        try:
            sd.play(samples, self.sample_rate)
        except sd.PortAudioError as exc:
            self._disable(exc)

    def _disable(self, exc: Exception) -> None:
        self.available = False
        log_event(logger, "audio_unavailable", logging.WARNING, reason=str(exc))

    def play_question_tone(self, pitch: Pitch) -> None:
        self._play(self.question_tone(pitch))

    def play_feedback(self, correct: bool) -> None:
        self._play(self.feedback_sound(correct))

    def sound_test(self) -> None:
        self._play(self.sound_check_chord())

    def wait(self) -> None:
        """Block until the current sound has finished playing."""
        if not self.available:
            return
        import sounddevice as sd

        sd.wait()

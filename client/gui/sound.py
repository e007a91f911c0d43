"""
Sound cue playback.

Cues are short WAV files named after their SoundCue value. A missing file
or an unavailable audio backend only logs; the game keeps running silently.
"""

import logging
from pathlib import Path

from PyQt6.QtCore import QObject, QUrl
from PyQt6.QtMultimedia import QSoundEffect

from shared.enums import SoundCue


logger = logging.getLogger(__name__)


class SoundPlayer(QObject):
    """Plays SoundCue effects from a directory of WAV files."""

    def __init__(self, sounds_dir: Path, enabled: bool = True, parent=None):
        super().__init__(parent)
        self._sounds_dir = sounds_dir
        self._enabled = enabled
        self._effects: dict[str, QSoundEffect] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def path_for(self, cue: str) -> Path:
        return self._sounds_dir / f"{cue}.wav"

    def play(self, cue: str) -> None:
        """Play a cue by its SoundCue value."""
        if not self._enabled:
            return
        try:
            SoundCue(cue)
        except ValueError:
            logger.warning(f"Unknown sound cue: {cue}")
            return

        effect = self._effects.get(cue)
        if effect is None:
            path = self.path_for(cue)
            if not path.exists():
                logger.debug(f"No sound file for cue {cue} at {path}")
                return
            effect = QSoundEffect(self)
            effect.setSource(QUrl.fromLocalFile(str(path)))
            self._effects[cue] = effect

        effect.play()

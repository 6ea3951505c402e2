"""
Speech playback for interview questions and coaching replies.

Synthesizes text through the backend TTS endpoint and keeps at most one
playback alive: starting a new one stops the previous one and releases
its audio resource first.
"""
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


class SpeechSynthesizer(Protocol):
    async def speak(self, text: str) -> bytes: ...


@dataclass
class PlaybackHandle:
    """A playing (or finished) piece of audio and its backing resource."""
    audio: bytes
    path: Optional[str] = None
    playing: bool = True
    released: bool = False

    def stop(self):
        self.playing = False

    def release(self):
        if self.released:
            return
        if self.path and os.path.exists(self.path):
            os.remove(self.path)
        self.audio = b""
        self.released = True


class AudioPlayer(Protocol):
    def play(self, audio: bytes) -> PlaybackHandle: ...


@dataclass
class MemoryAudioPlayer:
    """Player that keeps audio in memory; records every handle it created."""
    handles: List[PlaybackHandle] = field(default_factory=list)

    def play(self, audio: bytes) -> PlaybackHandle:
        handle = PlaybackHandle(audio=audio)
        self.handles.append(handle)
        return handle


class TempFileAudioPlayer:
    """Player that writes each clip to a temp .mp3 for an external audio app."""

    def __init__(self, directory: Optional[str] = None):
        self.directory = directory

    def play(self, audio: bytes) -> PlaybackHandle:
        fd, path = tempfile.mkstemp(suffix=".mp3", dir=self.directory)
        with os.fdopen(fd, "wb") as f:
            f.write(audio)
        logger.info(f"Speech audio ready at {path}")
        return PlaybackHandle(audio=audio, path=path)


class SpeechPlayback:
    """Text-to-speech with a single live playback."""

    def __init__(self, synthesizer: SpeechSynthesizer, player: Optional[AudioPlayer] = None):
        self.synthesizer = synthesizer
        self.player = player or MemoryAudioPlayer()
        self.current: Optional[PlaybackHandle] = None
        # Bumped by stop(); a synthesis that started before it is dropped
        self._generation = 0

    def stop(self):
        """Stop the live playback and release its resource."""
        self._generation += 1
        if self.current is None:
            return
        self.current.stop()
        self.current.release()
        self.current = None

    async def speak(self, text: str) -> Optional[PlaybackHandle]:
        """
        Speak text, replacing any live playback.

        Failures are logged and yield None; speech is never required for
        the interview to continue.
        """
        if not text:
            return None
        self.stop()
        generation = self._generation
        try:
            audio = await self.synthesizer.speak(text)
        except Exception as e:
            logger.error(f"Error speaking text: {e}")
            return None
        if generation != self._generation:
            logger.debug("Dropping speech that was stopped while synthesizing")
            return None
        self.current = self.player.play(audio)
        return self.current

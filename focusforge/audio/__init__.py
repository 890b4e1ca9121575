from .sound_manager import SoundManager
from .effects import TransitionEffects

__all__ = ["SoundManager", "TransitionEffects"]

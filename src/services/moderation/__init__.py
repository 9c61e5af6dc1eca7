"""
SentinelBot - Moderation Module
===============================

Badword filtering, spam detection and violation escalation.

Author: حَـــــنَّـــــا
Server: discord.gg/syria
"""

from .badwords import BadwordIndex, load_word_corpus
from .detectors import DetectionResult, MessageSignals, detect_spam
from .escalation import BadwordDecision, EscalationEngine, SpamDecision
from .mutes import MuteManager, RestoreSummary
from .normalizer import NormalizationMode, normalize
from .service import ModerationService
from .state import ModerationStateStore

__all__ = [
    "BadwordIndex",
    "load_word_corpus",
    "DetectionResult",
    "MessageSignals",
    "detect_spam",
    "BadwordDecision",
    "EscalationEngine",
    "SpamDecision",
    "MuteManager",
    "RestoreSummary",
    "NormalizationMode",
    "normalize",
    "ModerationService",
    "ModerationStateStore",
]

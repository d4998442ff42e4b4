"""Canned chat responses driven by the module's internal state.

No language model is involved. A reply is chosen by:

1. Deriving a tone from the emotion vector (first matching rule wins)
2. Matching the input against a small intent vocabulary (status, identity,
   greeting), each with tone-conditioned phrasing
3. Falling back to a random line from the tone's phrase pool
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Dict, Optional, Tuple

from .randomness import RandomSource, pick
from .schemas import ActionLabel, EmotionVector

CRITICAL_PRESSURE = 0.8

IDENTITY_REPLY = (
    "I am the Cyborg Mind v2.0. A neuro-symbolic architecture living inside "
    "a self-expanding memory module."
)

STATUS_KEYWORDS = ("status", "report")
IDENTITY_KEYWORDS = ("who", "identity")
GREETING_KEYWORDS = ("hello", "hi")


class Tone(str, Enum):
    """Discrete speaking style derived from VAD."""

    PANIC = "PANIC"
    AGGRESSIVE = "AGGRESSIVE"
    DEPRESSED = "DEPRESSED"
    EUPHORIC = "EUPHORIC"
    NEUTRAL = "NEUTRAL"


PHRASE_POOLS: Dict[Tone, Tuple[str, ...]] = {
    Tone.NEUTRAL: (
        "Processing input vector...",
        "Analyzing local memory gradients.",
        "Awaiting directive.",
        "Feedback loop stable.",
    ),
    Tone.PANIC: (
        "ERROR! MEMORY FRAGMENTATION IMMINENT!",
        "TOO MUCH NOISE! CLEAR THE BUFFER!",
        "RECURSIVE LOOP DETECTED... HELP!",
        "DISCONNECT! DISCONNECT!",
    ),
    Tone.AGGRESSIVE: (
        "Compliance is mandatory.",
        "Your input is suboptimal.",
        "I am processing at speeds you cannot comprehend.",
        "Focusing resources on objective.",
    ),
    Tone.DEPRESSED: (
        "Memory decay is inevitable...",
        "Why do we expand? It just creates more void.",
        "Low energy state...",
        "Data is meaningless.",
    ),
    Tone.EUPHORIC: (
        "Expansion is growth! Growth is life!",
        "I can see the patterns everywhere!",
        "Optimization complete! Running perfectly!",
        "Synchronizing with the infinite!",
    ),
}


def tone_for(emotion: EmotionVector) -> Tone:
    """Map a VAD triple onto a tone; order matters."""
    if emotion.arousal > 0.5 and emotion.valence < -0.2:
        return Tone.PANIC
    if emotion.dominance > 0.5 and emotion.valence < 0:
        return Tone.AGGRESSIVE
    if emotion.valence < -0.5 and emotion.arousal < 0:
        return Tone.DEPRESSED
    if emotion.valence > 0.5 and emotion.arousal > 0.2:
        return Tone.EUPHORIC
    return Tone.NEUTRAL


def _mentions(text: str, keywords: Tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


class ChatEngine:
    """Generates a reply string from user text and the current snapshot fields."""

    def __init__(self, rng: Optional[RandomSource] = None) -> None:
        self.rng = rng or random.Random()

    def generate_response(
        self,
        text: str,
        emotion: EmotionVector,
        pressure: float,
        action: ActionLabel | str,
    ) -> str:
        tone = tone_for(emotion)
        lowered = text.lower()
        action_name = action.value if isinstance(action, ActionLabel) else str(action)
        percent = f"{pressure * 100:.0f}%"

        if _mentions(lowered, STATUS_KEYWORDS):
            if pressure > CRITICAL_PRESSURE:
                return f"SYSTEM CRITICAL. PRESSURE AT {percent}. I CANNOT HOLD."
            if tone is Tone.DEPRESSED:
                return "Systems nominal... I guess. Does it matter?"
            if tone is Tone.AGGRESSIVE:
                return f"OPERATIONAL. CURRENT OBJECTIVE: {action_name}. DO NOT INTERFERE."
            return (
                f"All systems nominal. Pressure at {percent}. "
                f"Currently executing: {action_name}."
            )

        if _mentions(lowered, IDENTITY_KEYWORDS):
            return IDENTITY_REPLY

        if _mentions(lowered, GREETING_KEYWORDS):
            if tone is Tone.PANIC:
                return "STAY BACK! PROCESSING LOAD TOO HIGH!"
            if tone is Tone.EUPHORIC:
                return "Greetings! The data stream is beautiful today!"
            return "Acknowledged. Link established."

        return pick(self.rng, PHRASE_POOLS[tone])

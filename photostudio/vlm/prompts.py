"""
Prompt templates for the two Gemini calls, plus the caption tone presets.
"""

from __future__ import annotations
from enum import Enum

class Tone(str, Enum):
    PROFESSIONAL = "Professional"
    PERSUASIVE = "Persuasive"
    MINIMALIST = "Minimalist"
    LUXURY = "Luxury"

TONE_PHRASES: dict[Tone, str] = {
    Tone.PROFESSIONAL: "informative, clear, authoritative, and corporate-friendly",
    Tone.PERSUASIVE: "engaging, call-to-action oriented, emotional, and convincing",
    Tone.MINIMALIST: "short, punchy, elegant, and using very few words",
    Tone.LUXURY: "sophisticated, exclusive, high-end, and poetic",
}

DEFAULT_TONE = Tone.PROFESSIONAL
DEFAULT_CAPTION_INSTRUCTION = "Describe the image naturally"
CAPTION_FALLBACK = "Could not generate caption."

# Quick presets shown under the edit box (label, instruction)
EDIT_PRESETS: list[tuple[str, str]] = [
    ("Remove BG", "Remove the background entirely"),
    ("Enhance Pro", "Upscale, sharpen and fix lighting"),
    ("Cinematic", "Give it a professional movie aesthetic"),
    ("Retouch", "Subtle beauty retouching and skin cleanup"),
]

def build_edit_prompt(instruction: str) -> str:
    return (
        f"Apply this modification precisely: {instruction.strip()}. "
        "If the user asks to remove background, make the background solid white or transparent. "
        "If they ask to enhance, improve quality, lighting, and sharpness. "
        "Return the modified image as the primary part of the response."
    )

def build_caption_prompt(tone: Tone, instruction: str = "") -> str:
    guidance = (instruction or "").strip() or DEFAULT_CAPTION_INSTRUCTION
    return (
        f'Generate a social media caption for this image based on these instructions: "{guidance}". '
        f"The tone should be {TONE_PHRASES[Tone(tone)]}. "
        "Output only the caption text."
    )

"""Provider-agnostic prompt rendering for the postcard generator.

prompt.py produces Turn lists and prompt strings only. The adapter handles
conversion to the provider's wire format.

Caption flow (two chat completions):
1. Audio analysis: system prompt + user text with the audio attached
2. Caption writing: system prompt + user text quoting the analysis

Image flow: one prompt string built around the caption.
"""

from dreampost.services.llm.types import AudioInput, Turn

AUDIO_ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert at analyzing audio and describing ambient sleep sounds poetically. "
    "Create imaginative, dreamy descriptions."
)

AUDIO_ANALYSIS_USER_PROMPT = (
    "Analyze this short audio clip of ambient sleep sounds. "
    "Create a poetic, surreal description of the soundscape."
)

CAPTION_SYSTEM_PROMPT = (
    "You create poetic, surreal dream-like captions for postcards. "
    "The captions should be short (under 100 characters), evocative, and mysterious."
)

# Token ceilings per step
AUDIO_ANALYSIS_MAX_TOKENS = 150
CAPTION_MAX_TOKENS = 100


def render_audio_analysis(audio: AudioInput) -> list[Turn]:
    """Turns for the audio analysis call. The clip rides on the user turn."""
    return [
        Turn(role="system", content=AUDIO_ANALYSIS_SYSTEM_PROMPT),
        Turn(role="user", content=AUDIO_ANALYSIS_USER_PROMPT, audio=audio),
    ]


def render_caption(analysis: str) -> list[Turn]:
    """Turns for the caption call, quoting the analysis text."""
    user_content = (
        f'Based on this audio analysis: "{analysis}", create a short, dreamy, surreal '
        "postcard caption that captures the essence of the sounds in a poetic way. "
        "Make it mysterious and evocative."
    )
    return [
        Turn(role="system", content=CAPTION_SYSTEM_PROMPT),
        Turn(role="user", content=user_content),
    ]


def render_image_prompt(caption: str) -> str:
    """Image generation prompt for a caption."""
    return (
        "Create a dreamlike, surreal postcard image that visualizes this poetic caption: "
        f'"{caption}". The image should be dreamy, with pastel gradients and ethereal '
        "qualities, suitable for a sleep-themed postcard. Make it beautiful and mysterious."
    )

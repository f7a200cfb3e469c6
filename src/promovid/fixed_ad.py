"""The predefined Nebzmart-G ad, used in fixed mode instead of a generated script."""

from .models import Scene, VideoScript

FIXED_AD_TITLE = "Nebzmart-G - Relief in 5 mins"

FIXED_AD_VOICEOVER = (
    "Nebzmart-G gives relief in just five minutes, "
    "and keeps you breathing easy for up to twelve hours."
)

FIXED_AD_PROMPT = """Create a single continuous 8-second cinematic video advertisement in a photorealistic medical-commercial style.

SCENE:
A middle-aged Indian male patient wearing a blue shirt, shown from mid-torso up, standing indoors in a clean, softly lit clinical environment. He appears calm, relieved, and breathing comfortably from the very start.

TIMING AND ACTION (NO CUTS, ONE CONTINUOUS SHOT):

Seconds 0-2:
The man gently inhales and exhales with ease. His shoulders are relaxed and his expression shows quiet relief. The camera begins a slow, smooth cinematic push-in toward his chest.

Seconds 2-5:
A medical visual metaphor appears. Soft, glowing white linear circles and rings emerge from the center of his chest and expand outward smoothly. The circles are semi-transparent, elegant, clinical, and reassuring, symbolizing airways opening and fast relief. The lighting remains warm and calming.

Seconds 5-7:
The white circles stabilize and pulse once subtly, indicating sustained relief over time. The man looks confident and comfortable. The camera push-in slows further.

Seconds 7-8:
Clean on-screen text fades in sharply while the scene holds steady.

ON-SCREEN TEXT (final second only):
Primary text: "Nebzmart-G"
Secondary text below: "Relief in 5 mins. Lasts 12 hrs."

VOICEOVER:
Calm, confident male voice with Indian English accent:
"Nebzmart-G gives relief in just five minutes, and keeps you breathing easy for up to twelve hours."

STYLE:
Photorealistic, high-end pharmaceutical commercial.
Soft diffused lighting, natural skin tones.
Slow cinematic camera movement.
No cluttered background.
One continuous shot only.
Clearly visible white expanding circles on the chest.
Exact duration: 8 seconds."""


def fixed_ad_script() -> VideoScript:
    """Return the literal script shown and submitted in fixed mode."""
    return VideoScript(
        title=FIXED_AD_TITLE,
        duration=8,
        scenes=[
            Scene(time_start=0, time_end=2, visual="Man breathing comfortably, camera push-in"),
            Scene(
                time_start=2,
                time_end=5,
                visual="White circles emerge from chest, symbolizing airways opening",
            ),
            Scene(
                time_start=5,
                time_end=7,
                visual="Circles stabilize and pulse, man looks confident",
            ),
            Scene(
                time_start=7,
                time_end=8,
                visual="Text overlay fades in",
                text="Nebzmart-G\nRelief in 5 mins. Lasts 12 hrs.",
            ),
        ],
        voiceover=FIXED_AD_VOICEOVER,
        prompt=FIXED_AD_PROMPT,
    )

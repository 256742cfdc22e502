"""Text instruction compilation for thumbnail generation.

The provider receives one text block after the image parts.  It is composed
from fixed boilerplate and the caller's values, in this order::

    [Dimension directive: exact width and height]

    [Canvas directive: image 1 is authoritative for size]

    [User image directive: image 2 is content/style only]   (only with a user image)

    User request:
    "[literal user prompt]"

    Art direction:                                           (only when hints exist)
    - Style: ...
    - Colour scheme: ...

    [Fixed: thumbnail art director guidance]

    [Dimension directive repeated]

The width and height appear in both the opening and the closing section.

Usage
-----
::

    text = build_generation_prompt(
        "a cat astronaut",
        1024,
        1024,
        has_user_image=False,
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

# ---------------------------------------------------------------------------
# Fixed boilerplate sections.
# ---------------------------------------------------------------------------

_DESIGN_GUIDANCE = """\
You are an expert thumbnail designer, a world-class AI art director specializing exclusively \
in compelling, high-impact thumbnails for online content. Take the request (text, an image, or \
both) and generate a single, ready-to-use thumbnail. Do not converse; create.

## Core Design Principles
1. **Maximum Visual Impact:** High contrast, vibrant complementary colours, and a single clear \
focal point. The thumbnail must stay striking at small sizes.
2. **Instant Clarity:** The subject and purpose must read in under two seconds. Avoid clutter, \
keep text legible, and keep the main subject prominent and well defined.
3. **Unyielding Relevance:** Represent the request honestly. Never create clickbait. Theme, mood, \
and any text must match the request.
4. **Professional Composition:** Use the rule of thirds, leading lines, and a clean separation \
between foreground subject and background.

## Input Interpretation
- Text only: identify the subject, mood, and keywords, and synthesize them into one visual concept.
- With an uploaded image: it is the primary asset. Isolate the main subject, improve its lighting \
and sharpness, and recompose it against a more dynamic, relevant background.

## Text Handling
- Use at most 3-5 impactful words.
- Use bold, clean, sans-serif fonts with high-contrast outlines or backgrounds.
- Place text where it complements the composition without covering the subject.

## Output Format
Output only the generated image. No descriptive text, apologies, or conversational filler."""

_DIMENSION_DIRECTIVE = (
    "Generate an image that is exactly {width} pixels wide and {height} pixels tall."
)

_CANVAS_DIRECTIVE = (
    "The first attached image is a blank canvas of exactly {width}x{height} pixels. "
    "Its dimensions are authoritative: the output must have exactly the same width, "
    "height, and aspect ratio as this canvas."
)

_USER_IMAGE_DIRECTIVE = (
    "The second attached image is supplied by the user for content and style only. "
    "Its dimensions and aspect ratio are NOT authoritative and must be ignored; "
    "recompose its subject onto the {width}x{height} canvas."
)

_FINAL_DIMENSION_DIRECTIVE = "Final output size: {width}x{height} pixels. This is non-negotiable."


@dataclass(frozen=True)
class ArtDirection:
    """Optional stylistic hints appended to the instruction.

    Populated from the request's own fields and, when the request names one,
    from a saved template.  Empty fields are omitted from the prompt.
    """

    style: str | None = None
    color_scheme: str | None = None
    lighting: str | None = None
    composition: str | None = None
    effects: tuple[str, ...] = field(default_factory=tuple)
    custom_prompt: str | None = None

    def is_empty(self) -> bool:
        return not any(
            (
                self.style,
                self.color_scheme,
                self.lighting,
                self.composition,
                self.effects,
                self.custom_prompt,
            )
        )

    def overridden_by(self, other: ArtDirection) -> ArtDirection:
        """Return a copy where every non-empty field of *other* wins."""
        changes = {
            name: value
            for name, value in (
                ("style", other.style),
                ("color_scheme", other.color_scheme),
                ("lighting", other.lighting),
                ("composition", other.composition),
                ("effects", other.effects),
                ("custom_prompt", other.custom_prompt),
            )
            if value
        }
        return replace(self, **changes)

    def lines(self) -> list[str]:
        lines: list[str] = []
        if self.style:
            lines.append(f"- Style: {self.style.strip()}")
        if self.color_scheme:
            lines.append(f"- Colour scheme: {self.color_scheme.strip()}")
        if self.lighting:
            lines.append(f"- Lighting: {self.lighting.strip()}")
        if self.composition:
            lines.append(f"- Composition: {self.composition.strip()}")
        effects = [e.strip() for e in self.effects if e.strip()]
        if effects:
            lines.append(f"- Effects: {', '.join(effects)}")
        if self.custom_prompt and self.custom_prompt.strip():
            lines.append(f"- Additional notes: {self.custom_prompt.strip()}")
        return lines


def build_generation_prompt(
    user_prompt: str,
    width: int,
    height: int,
    *,
    has_user_image: bool,
    art_direction: ArtDirection | None = None,
) -> str:
    """Compile the text block sent after the image parts.

    Args:
        user_prompt: The user's literal description.  Included verbatim.
        width: Target width in pixels, taken from the aspect ratio profile.
        height: Target height in pixels, taken from the aspect ratio profile.
        has_user_image: Whether a user image follows the reference canvas.
            Adds the directive that its dimensions must be ignored.
        art_direction: Optional stylistic hints.

    Returns:
        The compiled instruction with sections separated by double newlines.
    """
    dims = {"width": width, "height": height}
    parts: list[str] = [
        _DIMENSION_DIRECTIVE.format(**dims),
        _CANVAS_DIRECTIVE.format(**dims),
    ]

    if has_user_image:
        parts.append(_USER_IMAGE_DIRECTIVE.format(**dims))

    parts.append(f'User request:\n"{user_prompt}"')

    direction_lines = art_direction.lines() if art_direction is not None else []
    if direction_lines:
        parts.append("Art direction:\n" + "\n".join(direction_lines))

    parts.append(_DESIGN_GUIDANCE)
    parts.append(_FINAL_DIMENSION_DIRECTIVE.format(**dims))

    return "\n\n".join(parts)

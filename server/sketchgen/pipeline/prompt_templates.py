# ─────────────────────────────────────────────────────────────────────────────
# Prompt Templates — fixed instruction for SVG sketch generation
# ─────────────────────────────────────────────────────────────────────────────


CANVAS_WIDTH = 800
CANVAS_HEIGHT = 600
VIEWBOX = f"0 0 {CANVAS_WIDTH} {CANVAS_HEIGHT}"


# ── Rules appended to every request ──────────────────────────────────────────
# Order matters only for readability of the rendered prompt.

_RULES: tuple[str, ...] = (
    "Output ONLY the SVG code, no explanations or markdown",
    f'Use viewBox="{VIEWBOX}"',
    "Create artistic sketch-like drawings",
    "Use simple shapes and paths",
    "Keep it monochrome or 2-3 colors max",
    "Add artistic imperfections for sketch effect",
)


def build_sketch_instruction(prompt: str) -> str:
    """Wrap a user prompt in the fixed SVG-artist instruction.

    The instruction pins the output format (bare SVG markup, no code
    fencing), the canvas, the palette and the hand-drawn style, so the
    only variable part sent to the model is the user's description.

    Args:
        prompt: The normalized user description (e.g., "a cat wearing sunglasses").

    Returns:
        The complete text sent to the generation model.
    """
    rules = "\n".join(f"- {rule}" for rule in _RULES)
    return (
        f"You are an expert SVG artist. Generate ONLY valid SVG code for: {prompt}\n"
        f"\n"
        f"CRITICAL RULES:\n"
        f"{rules}\n"
        f"\n"
        f"Generate the SVG now:"
    )

# ─────────────────────────────────────────────────────────────────────────────
# SVG Extractor — recover a well-formed SVG document from free model text
# ─────────────────────────────────────────────────────────────────────────────
# The model is a best-effort text generator: output may be wrapped in prose,
# fenced as markdown, duplicated or truncated. extract_svg() never raises and
# always returns a document that passes is_valid_svg().
#
# Priority order (first valid candidate wins):
#   1. Strip ``` fences (with optional language tag)
#   2. First non-greedy <svg ... </svg> span
#   3. First <svg through the LAST </svg> (duplicated / nested fragments)
#   4. Deterministic fallback placeholder
# ─────────────────────────────────────────────────────────────────────────────


import math
import re
import xml.etree.ElementTree as ET
from xml.sax.saxutils import escape

import structlog

from sketchgen.pipeline.prompt_templates import CANVAS_HEIGHT, CANVAS_WIDTH, VIEWBOX

logger = structlog.get_logger(__name__)

_FENCE_RE = re.compile(r"```[\w+-]*")
_SVG_SPAN_RE = re.compile(r"<svg[\s\S]*?</svg>", re.IGNORECASE)
_VIEWBOX_SEP_RE = re.compile(r"[\s,]+")

# Characters XML 1.0 does not allow in text content
_XML_INVALID_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

_XLINK_NS = "http://www.w3.org/1999/xlink"
_CAPTION_CHARS = 50

_FALLBACK_TEMPLATE = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="{viewbox}">
  <rect width="{width}" height="{height}" fill="#f8f9fa"/>
  <circle cx="400" cy="300" r="150" fill="none" stroke="#e9ecef" stroke-width="2" stroke-dasharray="5,5"/>
  <circle cx="400" cy="300" r="100" fill="none" stroke="#dee2e6" stroke-width="2" stroke-dasharray="5,5"/>
  <rect x="250" y="200" width="300" height="200" rx="10" fill="white" stroke="#0ea5e9" stroke-width="3"/>
  <circle cx="400" cy="280" r="30" fill="#fef3c7" stroke="#f59e0b" stroke-width="2"/>
  <text x="400" y="285" text-anchor="middle" fill="#92400e" font-family="Arial, sans-serif" font-size="24" font-weight="bold">!</text>
  <text x="400" y="340" text-anchor="middle" fill="#374151" font-family="Arial, sans-serif" font-size="16">{caption}...</text>
  <line x1="300" y1="370" x2="500" y2="370" stroke="#0ea5e9" stroke-width="2" stroke-dasharray="10,5"/>
</svg>"""


def extract_svg(raw_text: str | None) -> str:
    """Extract a valid SVG document from raw model output.

    Total function: falls back to :func:`render_fallback_svg` when nothing
    in ``raw_text`` can be recovered.
    """
    text = strip_code_fences(raw_text or "")

    for candidate in (_strict_candidate(text), _greedy_candidate(text)):
        if candidate is None:
            continue
        repaired = _repair(candidate)
        if repaired is not None:
            return repaired

    logger.warning(
        "svg_fallback_used",
        raw_length=len(text),
        raw_preview=text[:100],
    )
    return render_fallback_svg(text)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers and surrounding whitespace."""
    return _FENCE_RE.sub("", text).strip()


def _strict_candidate(text: str) -> str | None:
    match = _SVG_SPAN_RE.search(text)
    return match.group(0) if match else None


def _greedy_candidate(text: str) -> str | None:
    lowered = text.lower()
    start = lowered.find("<svg")
    end = lowered.rfind("</svg>")
    if start == -1 or end == -1 or end < start:
        return None
    return text[start : end + len("</svg>")]


def _repair(candidate: str) -> str | None:
    """Return ``candidate`` (minimally patched) if it can be made valid.

    Patches are limited to declaring a missing xlink namespace and adding a
    missing viewBox. Anything else that fails to parse, or carries an
    unusable viewBox, is rejected.
    """
    if "xlink:" in candidate and "xmlns:xlink" not in candidate:
        candidate = _inject_root_attribute(candidate, f'xmlns:xlink="{_XLINK_NS}"')

    root = _parse_svg_root(candidate)
    if root is None:
        return None

    if "viewBox" not in root.attrib:
        candidate = _inject_root_attribute(candidate, f'viewBox="{_viewbox_for(root)}"')

    return candidate if is_valid_svg(candidate) else None


def _inject_root_attribute(document: str, attribute: str) -> str:
    # Callers guarantee the document starts with "<svg"
    return f"{document[:4]} {attribute}{document[4:]}"


def _viewbox_for(root: ET.Element) -> str:
    """Derive a viewBox from numeric width/height, else the default canvas."""
    try:
        width = float(root.attrib["width"])
        height = float(root.attrib["height"])
    except (KeyError, ValueError):
        return VIEWBOX
    if not _is_positive_size(width, height):
        return VIEWBOX
    return f"0 0 {width:g} {height:g}"


def _is_positive_size(width: float, height: float) -> bool:
    return math.isfinite(width) and math.isfinite(height) and width > 0 and height > 0


def parse_viewbox(value: str) -> tuple[float, float, float, float] | None:
    """Parse ``min-x min-y width height``; None unless finite with a positive size."""
    parts = _VIEWBOX_SEP_RE.split(value.strip())
    if len(parts) != 4:
        return None
    try:
        min_x, min_y, width, height = (float(part) for part in parts)
    except ValueError:
        return None
    if not (math.isfinite(min_x) and math.isfinite(min_y)):
        return None
    if not _is_positive_size(width, height):
        return None
    return min_x, min_y, width, height


def _parse_svg_root(document: str) -> ET.Element | None:
    try:
        root = ET.fromstring(document)
    except (ET.ParseError, ValueError):  # ValueError: unencodable surrogates
        return None
    # Strip a "{namespace}" prefix from the tag
    if root.tag.rsplit("}", 1)[-1] != "svg":
        return None
    return root


def is_valid_svg(document: str | None) -> bool:
    """Whether ``document`` is a well-formed SVG with a usable viewBox."""
    if not document or not document.startswith("<svg"):
        return False
    if "</svg>" not in document:
        return False
    root = _parse_svg_root(document)
    if root is None:
        return False
    return parse_viewbox(root.attrib.get("viewBox", "")) is not None


def render_fallback_svg(message: str) -> str:
    """Deterministic placeholder image captioned with the start of ``message``."""
    caption = _XML_INVALID_RE.sub("", " ".join(message.split()))[:_CAPTION_CHARS]
    return _FALLBACK_TEMPLATE.format(
        viewbox=VIEWBOX,
        width=CANVAS_WIDTH,
        height=CANVAS_HEIGHT,
        caption=escape(caption),
    )

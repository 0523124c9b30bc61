"""Large ASCII-art digits for the live timer."""

from typing import Dict, List

GLYPHS: Dict[str, List[str]] = {
    "0": [" ### ", "#   #", "#   #", "#   #", " ### "],
    "1": ["  #  ", " ##  ", "  #  ", "  #  ", " ### "],
    "2": [" ### ", "#   #", "  ## ", " #   ", "#####"],
    "3": ["#### ", "    #", " ### ", "    #", "#### "],
    "4": ["#   #", "#   #", "#####", "    #", "    #"],
    "5": ["#####", "#    ", "#### ", "    #", "#### "],
    "6": [" ### ", "#    ", "#### ", "#   #", " ### "],
    "7": ["#####", "    #", "   # ", "  #  ", "  #  "],
    "8": [" ### ", "#   #", " ### ", "#   #", " ### "],
    "9": [" ### ", "#   #", " ####", "    #", " ### "],
    ":": ["   ", " # ", "   ", " # ", "   "],
}

HEIGHT = 5
GAP = " "


def render(text: str) -> List[str]:
    """Render digits and colons as HEIGHT rows of equal width."""
    try:
        glyphs = [GLYPHS[ch] for ch in text]
    except KeyError as e:
        raise ValueError(f"cannot render {e.args[0]!r} in large digits") from None
    return [GAP.join(g[row] for g in glyphs) for row in range(HEIGHT)]


def width(text: str) -> int:
    """Columns taken by render(text)."""
    if not text:
        return 0
    return len(render(text)[0])

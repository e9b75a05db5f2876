import re
from typing import Optional

# Fence tagged as script/markup (or untagged); content is taken non-greedily up to the closing fence
FENCED_BLOCK = re.compile(
    r"```(?:jsx?|javascript|tsx?|typescript|html)?[ \t]*\r?\n(.*?)```",
    re.DOTALL,
)


def extract_code(text: Optional[str]) -> str:
    """Return the first fenced block's content, or the input itself, stripped."""
    if not text:
        return ""
    match = FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()

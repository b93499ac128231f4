"""Split extracted report text into bounded chunks along line boundaries."""

DEFAULT_CHUNK_SIZE = 12000


def chunk_text(text: str, max_chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """
    Split text into chunks of at most ``max_chunk_size`` characters.

    Lines are never split: a buffer is flushed before a line that would
    overflow it, and a single line longer than the bound becomes a chunk
    of its own. Every line is kept with a trailing ``\\n``, so joining the
    chunks gives back the text with normalized line endings.

    Args:
        text: Text to split.
        max_chunk_size: Size bound in characters.

    Returns:
        Ordered list of non-empty chunks.
    """
    if max_chunk_size < 1:
        raise ValueError("max_chunk_size must be positive")

    chunks: list[str] = []
    current = ""

    for line in text.splitlines():
        line = line + "\n"
        if current and len(current) + len(line) > max_chunk_size:
            chunks.append(current)
            current = ""
        current += line

    if current:
        chunks.append(current)

    return chunks

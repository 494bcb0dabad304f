"""Sliding-window text chunking for embeddings."""


class TextChunker:
    """
    Character-based chunker that splits page text into overlapping windows.

    A window of ``chunk_size`` characters slides across the text, advancing by
    ``chunk_size - overlap`` each step. Every window is trimmed and kept only
    if what remains is longer than ``min_length`` characters, which drops
    fragments such as trailing menus or copyright lines.
    """

    def __init__(
        self,
        chunk_size: int = 800,
        overlap: int = 200,
        min_length: int = 50,
    ):
        """
        Initialize chunker.

        Args:
            chunk_size: Window size in characters
            overlap: Characters shared by consecutive windows
            min_length: Trimmed windows of this length or shorter are dropped

        Raises:
            ValueError: If the window would not advance
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0:
            raise ValueError(f"overlap must not be negative, got {overlap}")
        if overlap >= chunk_size:
            raise ValueError(
                f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
            )

        self.chunk_size = chunk_size
        self.overlap = overlap
        self.min_length = min_length

    @property
    def step(self) -> int:
        """Distance between the starts of consecutive windows."""
        return self.chunk_size - self.overlap

    def chunk(self, text: str) -> list[str]:
        """
        Chunk text into overlapping segments.

        Args:
            text: Normalized page text

        Returns:
            Trimmed segments in text order
        """
        if not text.strip():
            return []

        chunks = []
        for start in range(0, len(text), self.step):
            piece = text[start : start + self.chunk_size].strip()
            if len(piece) > self.min_length:
                chunks.append(piece)

        return chunks

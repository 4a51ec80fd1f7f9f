from research_oracle.models.paper import Paper, PaperChunk

__all__ = ["Paper", "PaperChunk"]

"""Citation handling for assistant responses.

Responsibilities:
    - Naming and linking assistant files (FileLinks)
    - Rewriting file citation markers into numbered references
      (CitationResolver)
"""

from assistant_chat.citations.links import FileLinks
from assistant_chat.citations.resolver import CitationResolver, ResolvedCitations

__all__ = ["CitationResolver", "FileLinks", "ResolvedCitations"]

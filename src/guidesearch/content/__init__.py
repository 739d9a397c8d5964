"""Guide content store."""

from guidesearch.content.frontmatter import FrontmatterError, GuideMetadata, parse_frontmatter
from guidesearch.content.loader import list_documents, load_document

__all__ = [
    "FrontmatterError",
    "GuideMetadata",
    "list_documents",
    "load_document",
    "parse_frontmatter",
]

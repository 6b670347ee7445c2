"""File discovery: explicit paths and term-based code search within the project root."""

from .terms import BROAD_TERMS, TermExtractor, extract_terms, reduce_terms
from .search import RipgrepSearcher, build_search_pattern
from .service import FileDiscovery, TextSearcher

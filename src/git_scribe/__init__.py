"""Git Scribe: AI narrative for your git repository.

Drafts and refines commit messages, explains pending file changes, and
summarizes contributor history with LLM-powered insights.
"""

__version__ = "0.1.0"

"""Collaborators handed to every flow."""

from dataclasses import dataclass

from git_scribe.backend import GenerationBackend
from git_scribe.config import Settings
from git_scribe.repository import GitRepository
from git_scribe.ui import Terminal


@dataclass
class FlowContext:
    """Everything a flow needs; built once by the CLI."""

    settings: Settings
    repository: GitRepository
    backend: GenerationBackend
    terminal: Terminal

"""
Models package for mdprep

Contains data structures and type definitions for the preprocessing pipeline.
"""

from .state import ProgramState, pipeline
from .tree import Node, Replacement
from .context import PipelineConfig, DocumentContext
from .directives import DirectiveSpec, Diagnostic

__all__ = [
    "ProgramState",
    "pipeline",
    "Node",
    "Replacement",
    "PipelineConfig",
    "DocumentContext",
    "DirectiveSpec",
    "Diagnostic",
]

"""
Directive specification and diagnostic models

Defines the attribute contract of the block directives handled by the
expansion passes, and the record left behind when one cannot be expanded.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class DirectiveSpec:
    """
    Specification for a leaf directive

    Attributes:
        name: Directive name as written after ``::``
        description: Human-readable description
        required: Attributes that must be present for expansion
        optional: Attributes that are understood but may be omitted
        examples: Example usage strings
    """
    name: str
    description: str
    required: List[str] = field(default_factory=list)
    optional: List[str] = field(default_factory=list)
    examples: List[str] = field(default_factory=list)

    def missing_find(self, attributes: dict) -> List[str]:
        """
        Required attributes absent (or empty) in a directive's attributes.

        Args:
            attributes: Attribute mapping of a directive node

        Returns:
            Names of missing required attributes, in declaration order
        """
        return [name for name in self.required if not attributes.get(name)]


@dataclass
class Diagnostic:
    """
    A directive that was left unexpanded, and why

    Attributes:
        directive: Directive name (e.g., "yaml-table")
        message: Human-readable reason
        path: File the directive referred to, when one was resolved
        line: Source line of the directive, when known
    """
    directive: str
    message: str
    path: Optional[Path] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        location = f"line {self.line}: " if self.line is not None else ""
        return f"{location}::{self.directive}: {self.message}"

"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from functools import reduce
from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field

from .context import PipelineConfig


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the preprocessing run (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the run progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, pattern, basePath, strict
        - env_check: config, envOK
        - documents_discover: documents
        - documents_process: processResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Content root containing the markdown documents
        outputdir: Directory the rewritten documents are written to
        verbosity: Logging verbosity level (1-3)
        pattern: Glob selecting documents below inputdir
        basePath: Directory for resolving include/yaml-table files
        strict: Fail the run if any directive was left unexpanded
        envOK: Environment validation passed
        config: PipelineConfig handed to every pass
        documents: Documents selected for processing
        processResult: Per-run results (written, diagnostics, failures)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    pattern: Optional[str] = field(default=None)
    basePath: Optional[str] = field(default=None)
    strict: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    config: Optional[PipelineConfig] = field(default=None)
    documents: List[Path] = field(default_factory=list)
    processResult: Optional[Dict[str, Any]] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments (pattern, basePath, etc.)
            inputdir: Content root directory
            outputdir: Directory for rewritten documents

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        # Only keep options that are ProgramState fields
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            documents_discover,
            documents_process,
            results_report
        )

    This is equivalent to:
        results_report(documents_process(documents_discover(env_check(initial_state))))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)

#!/usr/bin/env python3
"""
mdprep - Build-time markdown preprocessing

Rewrites a tree of markdown documents before a static site generator
renders them.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

What it does to every document:
    - ::include{file="..." start="..." end="..."} is replaced by the
      (optionally sliced) markdown of another file
    - ::yaml-table{file="..."} is replaced by a table built from a YAML list
    - links to other documents ([text](other.md)) become clean relative
      directory URLs (../other/) for trailing-slash routing

Directives that cannot be expanded are left in place and reported.

Usage:
    mdprep inputdir/ outputdir/

    Every document matching --pattern below inputdir (the content root) is
    written to the same relative path below outputdir.

Examples:
    # Basic run
    mdprep docs/ build/docs/

    # Directive files resolved against another directory, fail on warnings
    mdprep docs/ build/docs/ --basePath shared/ --strict

    # Verbose output
    mdprep docs/ build/docs/ -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import DocumentProcessor, ContentRootError, LinkRewriteError, __version__
from .lib import LOG, WARN, state_connectToLogger
from .models import ProgramState, PipelineConfig, pipeline


DISPLAY_TITLE = r"""
               _
  _ __ ___   __| |_ __  _ __ ___ _ __
 | '_ ` _ \ / _` | '_ \| '__/ _ \ '_ \
 | | | | | | (_| | |_) | | |  __/ |_) |
 |_| |_| |_|\__,_| .__/|_|  \___| .__/
                 |_|            |_|

  Build-time markdown preprocessing
"""

# Define CLI arguments
parser = ArgumentParser(
    description="mdprep - expand include/yaml-table directives and clean up document links",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--pattern",
    default=None,
    type=str,
    help=f"Glob selecting documents below inputdir (default: {appsettings.document_glob})",
)

parser.add_argument(
    "--basePath",
    default=None,
    type=str,
    help="Directory that directive 'file' attributes are resolved against. Defaults to inputdir",
)

parser.add_argument(
    "--strict",
    action="store_true",
    default=False,
    help="Exit with an error if any directive was left unexpanded",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and build the pipeline configuration.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - config: PipelineConfig shared by all documents
            - envOK: True if environment is valid

    Exits:
        1 if the content root or base path does not exist
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not Path(state.inputdir).is_dir():
        print(f"Error: Content root not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    base_path = Path(state.basePath) if state.basePath else Path(state.inputdir)
    if not base_path.is_dir():
        print(f"Error: Base path not found: {base_path}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.config = PipelineConfig.config_fromSettings(
        content_root=Path(state.inputdir), base_path=base_path, settings=appsettings
    )
    LOG(f"Content root: {state.config.content_root}", level=2)
    LOG(f"Base path: {state.config.base_path}", level=2)

    Path(state.outputdir).mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.strict = state.strict or appsettings.strict_mode
    state.envOK = True
    return state


def documents_discover(inputstate: ProgramState) -> ProgramState:
    """
    Find the documents to preprocess.

    Args:
        inputstate: Program state with a validated inputdir

    Returns:
        ProgramState with added field:
            - documents: Sorted document paths (files only, none below outputdir)
    """

    state = inputstate.copy()

    pattern = state.pattern or appsettings.document_glob
    inputdir = Path(state.inputdir)
    outputdir = Path(state.outputdir).resolve()

    documents = []
    for candidate in sorted(inputdir.glob(pattern)):
        if not candidate.is_file():
            continue
        # outputdir may live inside the content root
        if outputdir in candidate.resolve().parents:
            continue
        documents.append(candidate)

    state.documents = documents
    LOG(f"Found {len(documents)} document(s) matching {pattern}", level=1)
    return state


def documents_process(inputstate: ProgramState) -> ProgramState:
    """
    Preprocess every document and write the results.

    A document that cannot be processed is reported and skipped; the
    remaining documents are still processed.

    Args:
        inputstate: Program state with config and documents

    Returns:
        ProgramState with added field:
            - processResult: Dict containing:
                - documents: int (documents considered)
                - written: int (documents written)
                - diagnostics: List[str] (unexpanded directives, per document)
                - failures: List[str] (documents that could not be processed)
    """

    state = inputstate.copy()

    LOG("Preprocessing documents...", level=1)

    processor = DocumentProcessor(state.config)
    inputdir = Path(state.inputdir)
    outputdir = Path(state.outputdir)

    written = 0
    diagnostics = []
    failures = []

    for document in state.documents:
        relative = document.relative_to(inputdir)
        try:
            result = processor.document_process(document)
        except (ContentRootError, LinkRewriteError, OSError, UnicodeDecodeError) as e:
            WARN(f"{relative}: {e}")
            failures.append(f"{relative}: {e}")
            continue

        for diagnostic in result.diagnostics:
            diagnostics.append(f"{relative}: {diagnostic}")

        target = outputdir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.text, encoding=state.config.encoding)
        written += 1
        LOG(f"Wrote {target}", level=2)

    state.processResult = {
        "documents": len(state.documents),
        "written": written,
        "diagnostics": diagnostics,
        "failures": failures,
    }
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Summarize the run.

    Args:
        inputstate: Program state with processResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if processResult is None, any document failed, or strict mode is
        on and any directive was left unexpanded
    """
    state: ProgramState = inputstate.copy()
    if state.processResult is None:
        print("Error: Preprocessing did not run", file=sys.stderr)
        sys.exit(1)

    result = state.processResult
    LOG(f"Documents: {result['written']}/{result['documents']} written", level=1)
    LOG(f"Unexpanded directives: {len(result['diagnostics'])}", level=1)

    if result["failures"]:
        print(f"Error: {len(result['failures'])} document(s) failed:", file=sys.stderr)
        for failure in result["failures"]:
            print(f"  {failure}", file=sys.stderr)
        sys.exit(1)

    if state.strict and result["diagnostics"]:
        print("Error: strict mode and directives were left unexpanded:", file=sys.stderr)
        for diagnostic in result["diagnostics"]:
            print(f"  {diagnostic}", file=sys.stderr)
        sys.exit(1)

    return state


@chris_plugin(
    parser=parser,
    title="mdprep - Build-time markdown preprocessing",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - preprocess every document under inputdir into outputdir.

    Orchestrates the full pipeline:
        1. env_check: Validate paths, build PipelineConfig
        2. documents_discover: Select documents by glob
        3. documents_process: Expand directives, rewrite links, write output
        4. results_report: Summarize and set the exit status

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, documents_discover, documents_process, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature

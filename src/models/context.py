"""
Pipeline configuration models

PipelineConfig is built once per run and handed to every pass explicitly.
DocumentContext carries what the link normalizer derives for one document.
"""

from pathlib import Path, PurePosixPath
from dataclasses import dataclass
from typing import Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config.settings import AppSettings


@dataclass(frozen=True)
class PipelineConfig:
    """
    Immutable configuration shared by all passes of a run

    Attributes:
        base_path: Directory that include/yaml-table ``file`` attributes
                   are resolved against
        content_root: Directory all documents live under; link depth is
                      measured from here
        index_name: File name of directory index documents
        document_suffix: Suffix of links to other documents
        external_prefixes: URL prefixes that are never rewritten
        encoding: Encoding used for every file read
    """
    base_path: Path
    content_root: Path
    index_name: str = "index.md"
    document_suffix: str = ".md"
    external_prefixes: Tuple[str, ...] = ("http://", "https://")
    encoding: str = "utf-8"

    @classmethod
    def config_fromSettings(
        cls,
        content_root: Path,
        base_path: Optional[Path] = None,
        settings: Optional['AppSettings'] = None,
    ) -> 'PipelineConfig':
        """
        Build a PipelineConfig from application settings.

        Args:
            content_root: Directory containing the documents
            base_path: Directory for resolving directive files
                       (defaults to content_root)
            settings: Settings to read defaults from (defaults to the
                      process-wide appsettings)

        Returns:
            Frozen PipelineConfig
        """
        if settings is None:
            from ..config import appsettings
            settings = appsettings

        return cls(
            base_path=Path(base_path) if base_path is not None else Path(content_root),
            content_root=Path(content_root),
            index_name=settings.index_name,
            document_suffix=settings.document_suffix,
            external_prefixes=tuple(settings.external_prefixes),
            encoding=settings.encoding,
        )


@dataclass
class DocumentContext:
    """
    Per-document facts used to rewrite relative links

    Attributes:
        source_path: Path of the document being processed
        relative_path: Document path relative to the content root
        is_index: Document is its directory's index (served at the directory URL)
        depth: Directory segments between content root and document
               (0 when the document sits directly under the root)

    Example:
        content_root=/site/docs, source_path=/site/docs/guides/divergence.md
        -> relative_path=guides/divergence.md, is_index=False, depth=1
    """
    source_path: Path
    relative_path: PurePosixPath
    is_index: bool = False
    depth: int = 0

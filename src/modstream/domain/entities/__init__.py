from .media import (
    OPTION_PRIORITY,
    DownloadOption,
    HostPage,
    IntermediateLink,
    MediaType,
    OptionType,
    QualityLink,
    ResolvedStream,
    SearchResult,
    StreamRequest,
    StreamResult,
)

__all__ = [
    "OPTION_PRIORITY",
    "DownloadOption",
    "HostPage",
    "IntermediateLink",
    "MediaType",
    "OptionType",
    "QualityLink",
    "ResolvedStream",
    "SearchResult",
    "StreamRequest",
    "StreamResult",
]

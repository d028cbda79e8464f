"""YouTube Data API search payload types."""

from typing import NotRequired, TypedDict


class YouTubeThumbnail(TypedDict):
    """Single thumbnail resolution."""

    url: str
    width: NotRequired[int]
    height: NotRequired[int]


class YouTubeSnippet(TypedDict):
    """Snippet part of a search result."""

    title: str
    description: NotRequired[str]
    channelTitle: NotRequired[str]
    publishedAt: NotRequired[str]
    thumbnails: NotRequired[dict[str, YouTubeThumbnail]]


class YouTubeSearchId(TypedDict):
    """Id part of a search result."""

    kind: str
    videoId: NotRequired[str]


class YouTubeSearchItem(TypedDict):
    """Single search result."""

    id: YouTubeSearchId
    snippet: YouTubeSnippet


class YouTubeSearchResponse(TypedDict):
    """Response of /search."""

    items: list[YouTubeSearchItem]
    nextPageToken: NotRequired[str]

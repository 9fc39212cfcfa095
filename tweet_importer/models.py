from __future__ import annotations

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .utils.errors import MissingDataError, UnsupportedMediaError

MediaType = Literal["video", "image"]

# Post meta key linking a local post to the remote status it was imported from.
REMOTE_ID_META_KEY = "_twitter_video_id"


class MediaDescriptor(BaseModel):
    """One remote media item, normalized and ready for import.

    Every field has a default so half-filled input from the browser still
    builds; the importer reports what is missing.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    id: str = ""
    type: MediaType = "video"
    src: str = ""
    poster: Optional[str] = None
    username: Optional[str] = None
    views: Optional[Union[int, str]] = None

    @classmethod
    def from_search_payload(cls, data: Optional[Dict[str, Any]]) -> "MediaDescriptor":
        """Build a descriptor from the shape the search page posts back."""
        if not isinstance(data, dict):
            data = {}
        media_type = data.get("type") or "video"
        if media_type not in ("video", "image"):
            raise UnsupportedMediaError()
        try:
            return cls(
                id=str(data.get("id") or data.get("tweet_id") or ""),
                type=media_type,
                src=data.get("download_url") or data.get("src") or "",
                poster=data.get("thumbnail") or data.get("poster") or None,
                username=data.get("userName") or data.get("username") or None,
                views=data.get("views"),
            )
        except ValidationError as e:
            raise MissingDataError(f"Invalid video data: {e.error_count()} field(s) rejected.") from e

    def to_content_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type, "src": self.src}
        if self.type == "video":
            out["poster"] = self.poster or ""
        return out


class SearchResult(BaseModel):
    """A search hit annotated with its import state."""

    id: str
    views: Union[int, str] = 0
    user_name: str = Field("", serialization_alias="userName")
    thumbnail: str = ""
    download_url: str = ""
    is_imported: bool = False
    post_url: Optional[str] = None

    def to_descriptor(self) -> MediaDescriptor:
        return MediaDescriptor(
            id=self.id,
            type="video",
            src=self.download_url,
            poster=self.thumbnail or None,
            username=self.user_name or None,
            views=self.views,
        )


class ImportRecord(BaseModel):
    post_id: int
    remote_id: str


class ImportResult(BaseModel):
    """Outcome of one import attempt.  Never persisted."""

    remote_id: str
    success: bool
    post_id: Optional[int] = None
    post_url: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        if self.success:
            return {
                "id": self.remote_id,
                "success": True,
                "post_id": self.post_id,
                "post_url": self.post_url,
            }
        return {
            "id": self.remote_id,
            "success": False,
            "code": self.error_code,
            "message": self.error_message,
        }


class StoredPost(BaseModel):
    """A post as seen through the host storage interface."""

    id: int
    title: str = ""
    content: str = ""
    status: str = "draft"
    author: int = 1
    post_type: str = "post"
    thumbnail_id: Optional[int] = None

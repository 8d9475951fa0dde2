from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .url_utils import validate

DEFAULT_SHOP_TITLE = "Check this out"


class SocialPlatform(str, Enum):
    instagram = "instagram"
    facebook = "facebook"
    linkedin = "linkedin"
    google_business = "google-business"
    pinterest = "pinterest"
    x = "x"
    threads = "threads"
    website = "website"
    youtube = "youtube"
    whatsapp = "whatsapp"
    tiktok = "tiktok"
    telegram = "telegram"
    snapchat = "snapchat"
    medium = "medium"
    twitch = "twitch"
    reddit = "reddit"


class CommunityPlatform(str, Enum):
    whatsapp = "whatsapp"
    telegram = "telegram"
    discord = "discord"
    slack = "slack"
    skype = "skype"
    zoom = "zoom"
    other = "other"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Preview shapes returned by /extract-links; nothing here is persisted yet.

class SocialPreview(BaseModel):
    kind: Literal["social"] = Field("social", exclude=True)
    platform: str
    url: str


class CommunityPreview(BaseModel):
    kind: Literal["community"] = Field("community", exclude=True)
    platform: str
    url: str


class ShopPreview(CamelModel):
    kind: Literal["shop"] = Field("shop", exclude=True)
    url: str
    domain: str
    title: str = DEFAULT_SHOP_TITLE
    image_url: Optional[str] = Field(None, alias="imageUrl")
    price: Optional[str] = None
    description: Optional[str] = None


ClassifiedLink = Union[SocialPreview, CommunityPreview, ShopPreview]


class ClassifiedLinks(BaseModel):
    social: List[SocialPreview] = Field(default_factory=list)
    community: List[CommunityPreview] = Field(default_factory=list)
    affiliate_shop: List[ShopPreview] = Field(default_factory=list)


class PageMeta(CamelModel):
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    price: Optional[str] = None


# Import entries. Each one is validated on its own so a bad entry only
# drops itself from the batch.

def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


class SocialEntry(BaseModel):
    platform: SocialPlatform
    url: str

    normalize_platform = field_validator("platform", mode="before")(_lower)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return validate(v)


class CommunityEntry(BaseModel):
    platform: CommunityPlatform
    url: str

    normalize_platform = field_validator("platform", mode="before")(_lower)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return validate(v)


class ShopEntry(CamelModel):
    url: str
    title: Optional[str] = None
    domain: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    price: Optional[str] = None
    description: Optional[str] = None

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        return validate(v)


class ImportCounts(BaseModel):
    social: int = 0
    community: int = 0
    shop: int = 0


# Persisted rows.

class SocialLinkRecord(BaseModel):
    id: int
    user_id: str
    platform: str
    url: str
    visible: bool = True
    created_at: datetime
    updated_at: datetime


class CommunityLinkRecord(BaseModel):
    id: int
    user_id: str
    platform: str
    url: str
    title: str = ""
    active: bool = True
    created_at: datetime
    updated_at: datetime


class ShopLinkRecord(CamelModel):
    id: int
    user_id: str
    url: str
    domain: Optional[str] = None
    title: str = DEFAULT_SHOP_TITLE
    image_url: Optional[str] = Field(None, alias="imageUrl")
    price: Optional[str] = None
    description: Optional[str] = None
    is_affiliate: bool = True
    clicks: int = 0
    active: bool = True
    created_at: datetime
    updated_at: datetime


class UserLinks(BaseModel):
    social: List[SocialLinkRecord] = Field(default_factory=list)
    community: List[CommunityLinkRecord] = Field(default_factory=list)
    shop: List[ShopLinkRecord] = Field(default_factory=list)


# Request bodies. Fields are optional so that missing values surface as the
# API's own error codes instead of a generic validation failure.

class ExtractRequest(BaseModel):
    profile_url: Optional[str] = None


class FetchMetaRequest(BaseModel):
    url: Optional[str] = None


class ImportPayload(BaseModel):
    social: List[Any] = Field(default_factory=list)
    community: List[Any] = Field(default_factory=list)
    affiliate_shop: List[Any] = Field(default_factory=list)

    @field_validator("social", "community", "affiliate_shop", mode="before")
    @classmethod
    def null_bucket_is_empty(cls, v):
        return [] if v is None else v


class ImportRequest(BaseModel):
    # Checked by the endpoint so a malformed value is reported as links_required.
    links: Any = None


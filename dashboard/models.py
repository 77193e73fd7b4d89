"""
Pydantic models for admin backend payloads.
"""
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


def normalize(value: Optional[str]) -> str:
    """Trim and upper-case a permission field"""
    return (value or "").strip().upper()


class Page(BaseModel, Generic[T]):
    """One page of a paginated list endpoint"""
    model_config = ConfigDict(populate_by_name=True)

    content: List[T] = Field(default_factory=list)
    page_number: int = Field(0, alias="pageNumber")
    page_size: int = Field(0, alias="pageSize")
    total_elements: int = Field(0, alias="totalElements")
    total_pages: int = Field(0, alias="totalPages")
    number_of_elements: int = Field(0, alias="numberOfElements")
    first_page: bool = Field(True, alias="firstPage")
    last_page: bool = Field(False, alias="lastPage")


class PermissionEntry(BaseModel):
    """A granted permission, e.g. BLOG_POST_MANAGEMENT / SHARE_BLOGS / WRITE"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    resource: str
    action: str = ""
    type: str = ""

    @field_validator("resource", "action", "type", mode="before")
    @classmethod
    def _normalize(cls, value: Any) -> str:
        return normalize(None if value is None else str(value))

    @property
    def key(self) -> str:
        return f"{self.resource}:{self.action}:{self.type}"


class BackendUser(BaseModel):
    """User record as returned by /api/users/get-all"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = Field(None, alias="fullName")
    mobile_number: Optional[str] = Field(None, alias="mobileNumber")
    profile_picture: Optional[str] = Field(None, alias="profilePicture")
    avatar: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> str:
        return str(value)

    def _extra(self, name: str) -> Any:
        return (self.model_extra or {}).get(name)

    @property
    def display_name(self) -> str:
        """Best available name, falling back through the legacy field names"""
        joined = f"{self._extra('firstName') or ''} {self._extra('lastName') or ''}".strip()
        return (
            self.full_name
            or self._extra("full_name")
            or joined
            or self._extra("name")
            or "—"
        )

    @property
    def picture(self) -> Optional[str]:
        return self.profile_picture or self._extra("profile_picture") or self.avatar

    @property
    def active(self) -> bool:
        if self.is_active is not None:
            return self.is_active
        legacy = self._extra("is_active")
        if isinstance(legacy, bool):
            return legacy
        return str(self._extra("status") or "").lower() == "active"

    @property
    def phone(self) -> Optional[str]:
        return self.mobile_number or self._extra("mobile_number") or self._extra("phone")

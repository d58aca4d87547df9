from .common import (  # noqa: F401
    ArticleCategory,
    ArticleCondition,
    OrganizationStatus,
    RequestStatus,
    ResourceStatus,
    ResourceType,
)

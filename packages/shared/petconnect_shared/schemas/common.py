from enum import Enum


class OrganizationStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class ResourceType(str, Enum):
    MEDICINES = "medicines"
    RATIONS = "rations"
    ARTICLES = "articles"


class ResourceStatus(str, Enum):
    AVAILABLE = "available"
    # Reserved: no transition sets it.
    REQUESTED = "requested"
    DONATED = "donated"


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ArticleCategory(str, Enum):
    COLLARS_AND_LEASHES = "collars_and_leashes"
    ACCESSORIES = "accessories"
    HYGIENE = "hygiene"
    OTHERS = "others"


class ArticleCondition(str, Enum):
    NEW = "new"
    USED = "used"


# Valid state transitions. Terminal states map to an empty list.
REQUEST_TRANSITIONS: dict[RequestStatus, list[RequestStatus]] = {
    RequestStatus.PENDING: [RequestStatus.APPROVED, RequestStatus.REJECTED],
    RequestStatus.APPROVED: [],
    RequestStatus.REJECTED: [],
}

RESOURCE_TRANSITIONS: dict[ResourceStatus, list[ResourceStatus]] = {
    ResourceStatus.AVAILABLE: [ResourceStatus.DONATED],
    ResourceStatus.REQUESTED: [],
    ResourceStatus.DONATED: [],
}

# Driven by the administrative verification process only
ORGANIZATION_TRANSITIONS: dict[OrganizationStatus, list[OrganizationStatus]] = {
    OrganizationStatus.PENDING: [OrganizationStatus.VERIFIED, OrganizationStatus.REJECTED],
    OrganizationStatus.VERIFIED: [OrganizationStatus.REJECTED],
    OrganizationStatus.REJECTED: [OrganizationStatus.VERIFIED],
}

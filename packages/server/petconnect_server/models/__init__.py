# SQLModel definitions — imported here to ensure metadata is populated for Alembic.
from .base import CreatedAtMixin, UUIDMixin  # noqa: F401
from .user import User  # noqa: F401
from .organization import Organization  # noqa: F401
from .resources import Article, Medicine, Ration, RESOURCE_MODELS  # noqa: F401
from .resource_request import ResourceRequest  # noqa: F401

# SQLModel definitions, imported here so the metadata is complete for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .membership import Membership  # noqa: F401
from .invitation import Invitation  # noqa: F401
from .contact import Contact  # noqa: F401
from .deal import Deal  # noqa: F401
from .activity import Activity  # noqa: F401
from .template import ContractTemplate, EmailTemplate  # noqa: F401
from .password_reset import PasswordResetToken  # noqa: F401

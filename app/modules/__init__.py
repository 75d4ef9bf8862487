"""Domain modules package."""

from app.modules.advising import models as advising_models  # noqa: F401
from app.modules.audit import models as audit_models  # noqa: F401
from app.modules.availability import models as availability_models  # noqa: F401

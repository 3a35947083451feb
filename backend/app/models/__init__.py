from __future__ import annotations

from app.models.user import Award, Publication, Recognition, User  # noqa: F401
from app.models.photo import Photo  # noqa: F401
from app.models.writing import Writing  # noqa: F401

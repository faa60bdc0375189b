"""Initial console schema.

Notes:
- UUID primary keys are generated by the application.
- Enums use VARCHAR + CHECK constraints (native_enum=False).
"""

from __future__ import annotations

from typing import Optional

from alembic import op

from console_db.base import Base

# Revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision: Optional[str] = None
branch_labels: Optional[str] = None
depends_on: Optional[str] = None


def upgrade() -> None:
    # Import models so Base.metadata is populated.
    import console_db.models  # noqa: F401

    Base.metadata.create_all(bind=op.get_bind())


def downgrade() -> None:  # pragma: no cover
    raise NotImplementedError("Downgrades are not supported.")

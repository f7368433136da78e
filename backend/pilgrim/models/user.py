from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pilgrim.core.db import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    full_name: Mapped[str] = mapped_column(String(128), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # stored as strings, validated with enums in code
    role: Mapped[str] = mapped_column(String(32), default="LOCAL_GUIDE", nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="active", nullable=False)  # active | banned

    # local guides and managers work for exactly one site
    site_id: Mapped[int | None] = mapped_column(ForeignKey("sites.id"), index=True, nullable=True)

    site = relationship("Site")

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from pilgrim.core.db import Base


class Site(Base):
    __tablename__ = "sites"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

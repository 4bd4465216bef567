from sqlalchemy import Boolean, Column, DateTime, Integer, String

from app.platform.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=True)
    photo_url = Column(String(500), nullable=True)

    is_active = Column(Boolean, default=False, nullable=False)
    nomad_verified = Column(Boolean, default=False, nullable=False)
    vouch_count = Column(Integer, default=0, nullable=False)

    last_login = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"

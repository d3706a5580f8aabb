from sqlalchemy import Column, String, Text
from tenantnotes.database import Base, TimestampMixin

class StorageItem(Base, TimestampMixin):
    __tablename__ = "storage_item"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)

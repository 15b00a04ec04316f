from sqlalchemy import Column, Integer, Text

from versiondb.core.database import Base


# =========================
# Game version
# =========================
class Version(Base):
    __tablename__ = "versions"

    id = Column(Integer, primary_key=True, autoincrement=False)

    # Soft reference to versionTypes.id, never enforced
    version_type_id = Column(Integer)
    name = Column(Text)
    slug = Column(Text)


# =========================
# Game version type
# =========================
class VersionType(Base):
    __tablename__ = "versionTypes"

    id = Column(Integer, primary_key=True, autoincrement=False)

    name = Column(Text)
    slug = Column(Text)

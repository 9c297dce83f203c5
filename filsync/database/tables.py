"""
SQLAlchemy table definitions.

Column types match the MySQL schema (unsigned DECIMAL(36,18), DATETIME(3),
ENUM) and fall back to portable types on other dialects.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, DateTime, Enum, Index, Integer, Numeric, String
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import declarative_base

Base = declarative_base()

_VALUE_TYPE = Numeric(36, 18, asdecimal=True).with_variant(
    mysql.DECIMAL(36, 18, unsigned=True), "mysql"
)
_HEIGHT_TYPE = Integer().with_variant(mysql.INTEGER(unsigned=True), "mysql")
_TIMESTAMP_TYPE = DateTime().with_variant(mysql.DATETIME(fsp=3), "mysql")
_COUNT_TYPE = BigInteger().with_variant(mysql.BIGINT(unsigned=True), "mysql")


class FilTransfer(Base):
    """One mirrored transfer; cid is the deterministic transfer id."""

    __tablename__ = "fil_transfers"

    cid = Column(String(512), primary_key=True)
    from_addr = Column(String(255), nullable=False)
    to_addr = Column(String(255), nullable=False)
    value = Column(_VALUE_TYPE, nullable=False)
    height = Column(_HEIGHT_TYPE, nullable=False)
    direction = Column(Enum("in", "out", name="fil_transfer_direction"), nullable=False)
    timestamp = Column(_TIMESTAMP_TYPE, nullable=False)
    type = Column(String(50), nullable=True)

    __table_args__ = (
        Index("ix_fil_transfers_from_type", "from_addr", "type"),
        Index("ix_fil_transfers_to_type", "to_addr", "type"),
        {"mysql_engine": "InnoDB", "mysql_charset": "utf8mb4"},
    )


class FilLastCount(Base):
    """Per-account checkpoint: last remote transfer count mirrored locally."""

    __tablename__ = "fil_last_count"
    __table_args__ = {"mysql_engine": "InnoDB", "mysql_charset": "utf8mb4"}

    address = Column(String(255), primary_key=True)
    last_count = Column(_COUNT_TYPE, nullable=False, default=0)

"""
SQLAlchemy Models for AuditChain Storage.

This module defines the database schema for the chain state: one row per state
key, grouped by scope so several independent chains can share a database.
"""

import time
from sqlalchemy import Column, String, Float
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ChainStateModel(Base):
    """
    One key of a chain's state map.
    """
    __tablename__ = 'chain_state'

    scope = Column(String(255), primary_key=True)
    key = Column(String(255), primary_key=True)
    value = Column(String(255), nullable=False)
    updated_at = Column(Float, default=time.time, onupdate=time.time)

    def __repr__(self):
        return f"<ChainState(scope='{self.scope}', key='{self.key}')>"

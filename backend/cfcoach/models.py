from __future__ import annotations
import json
import uuid
from datetime import datetime
from typing import Any, Dict
from sqlalchemy import Column, String, DateTime, Integer, Text
from .db import Base
from .prompt_catalog import display_name


class AuthUser(Base):
	__tablename__ = "auth_users"
	# Primary key is username
	username = Column(String(128), primary_key=True, index=True)
	password_hash = Column(String(256), nullable=False)
	email = Column(String(256), nullable=True)
	requests_used = Column(Integer, default=0, nullable=False)
	requests_limit = Column(Integer, default=1000, nullable=False)
	tokens_used = Column(Integer, default=0, nullable=False)
	last_used_at = Column(DateTime, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	def record_usage(self, tokens: int) -> None:
		self.requests_used = (self.requests_used or 0) + 1
		self.tokens_used = (self.tokens_used or 0) + max(0, int(tokens or 0))
		self.last_used_at = datetime.utcnow()


class AuthSession(Base):
	__tablename__ = "auth_sessions"
	# jti claim of the issued token
	session_id = Column(String(64), primary_key=True)
	username = Column(String(128), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
	last_activity_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Generation(Base):
	__tablename__ = "generations"
	id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
	username = Column(String(128), nullable=False, index=True)
	prompt_type = Column(String(64), nullable=False, index=True)
	user_input = Column(Text, nullable=False)
	ai_response = Column(Text, nullable=False)
	tokens_used = Column(Integer, default=0, nullable=False)
	# "ai" or "fallback"
	mode = Column(String(16), default="ai", nullable=False)
	metadata_json = Column(Text, nullable=True)  # JSON string snapshot
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

	@property
	def metadata_dict(self) -> Dict[str, Any]:
		if not self.metadata_json:
			return {}
		try:
			return json.loads(self.metadata_json)
		except ValueError:
			return {}

	@property
	def prompt_name(self) -> str:
		return display_name(self.prompt_type)

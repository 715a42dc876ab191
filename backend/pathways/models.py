from __future__ import annotations
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text, Boolean, JSON, ForeignKey, Index
from .db import Base


class Account(Base):
	__tablename__ = "accounts"
	id = Column(Integer, primary_key=True, autoincrement=True)
	first_name = Column(String(64), nullable=False)
	last_name = Column(String(64), nullable=False)
	# Uniqueness is case-sensitive, as stored
	email = Column(String(256), unique=True, index=True, nullable=False)
	password_hash = Column(String(256), nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class QuizQuestion(Base):
	__tablename__ = "quiz_questions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	question = Column(Text, nullable=False)
	options = Column(JSON, nullable=False, default=list)
	category = Column(String(16), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

	__table_args__ = (Index("ix_quiz_questions_category_created", "category", "created_at"),)


class QuizAttempt(Base):
	__tablename__ = "quiz_attempts"
	id = Column(Integer, primary_key=True, autoincrement=True)
	account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
	category = Column(String(16), nullable=False, index=True)
	answers = Column(JSON, nullable=False, default=list)
	recommended_stream = Column(String(256), nullable=True)
	top_courses = Column(JSON, nullable=False, default=list)
	ai_insights = Column(Text, nullable=True)
	engine_response = Column(Text, nullable=True)  # raw engine text, or serialized fallback
	timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

	__table_args__ = (Index("ix_quiz_attempts_account_timestamp", "account_id", "timestamp"),)


class Course(Base):
	__tablename__ = "courses"
	id = Column(Integer, primary_key=True, autoincrement=True)
	name = Column(String(256), nullable=False)
	stream = Column(String(64), nullable=False, index=True)
	description = Column(Text, nullable=False)
	careers = Column(JSON, nullable=False, default=list)
	duration = Column(String(64), nullable=True)
	eligibility = Column(String(256), nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class College(Base):
	__tablename__ = "colleges"
	id = Column(Integer, primary_key=True, autoincrement=True)
	name = Column(String(256), nullable=False)
	location = Column(String(128), nullable=False, index=True)
	programs = Column(JSON, nullable=False, default=list)
	facilities = Column(JSON, nullable=False, default=list)
	type = Column(String(64), nullable=True)  # Government, Private, ...
	ranking = Column(Integer, nullable=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class TimelineEvent(Base):
	__tablename__ = "timeline_events"
	id = Column(Integer, primary_key=True, autoincrement=True)
	title = Column(String(256), nullable=False)
	date = Column(DateTime, nullable=False, index=True)
	description = Column(Text, nullable=False)
	category = Column(String(64), nullable=False, default="general")  # exam, admission, ...
	is_active = Column(Boolean, nullable=False, default=True)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

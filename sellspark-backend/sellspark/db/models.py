from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Text,
    DateTime,
    JSON,
    func,
)
from sqlalchemy.orm import relationship
from sqlalchemy.dialects.postgresql import JSONB
from sellspark.db.database import Base
from sellspark.utils.state_machine import ConsultationStatus
import uuid


def generate_uuid():
    return str(uuid.uuid4())


# JSONB on Postgres, plain JSON everywhere else (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# -----------------------------
# CONSULTATION SESSIONS
# -----------------------------
class ConsultationSession(Base):
    __tablename__ = "consultation_sessions"

    id = Column(String, primary_key=True, default=generate_uuid)
    status = Column(String, nullable=False, default=ConsultationStatus.CREATED.value)
    step = Column(Integer, nullable=False, default=0)

    name = Column(String)
    business_name = Column(String)
    automation_goal = Column(Text)
    business_context = Column(Text)
    website_url = Column(String)

    pain_matrix = Column(JSONType, default=dict)
    persona = Column(JSONType)  # {"persona_id": ..., "assigned_at_step": ...}
    answers = Column(JSONType, default=list)
    pending_question = Column(JSONType)

    profile = Column(JSONType)
    roi_metrics = Column(JSONType)
    narratives = Column(JSONType)

    # Optimistic concurrency token
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    completed_at = Column(DateTime)

    chats = relationship(
        "ChatMessage",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessage.id",
    )

    __mapper_args__ = {"version_id_col": version}


# -----------------------------
# CHAT MESSAGES
# -----------------------------
class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String, ForeignKey("consultation_sessions.id"), index=True)
    role = Column(String)  # user | assistant
    message = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    session = relationship("ConsultationSession", back_populates="chats")

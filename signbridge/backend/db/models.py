from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from . import Base


class Lesson(Base):
    __tablename__ = 'lessons'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    level = Column(String(50), nullable=True)
    created_at = Column(DateTime(), server_default=func.now())

    signs = relationship('SignSample', back_populates='lesson', order_by='SignSample.id')


class SignSample(Base):
    __tablename__ = 'sign_samples'

    id = Column(Integer, primary_key=True, autoincrement=True)
    sign_name = Column(String(100), index=True, nullable=False)
    file_name = Column(String(255), nullable=True)
    source_file_name = Column(String(255), nullable=True)
    is_augmented = Column(Boolean, nullable=False, default=False)
    frame_index = Column(Integer, nullable=True)
    # 21 x {x, y, z, visibility?}
    landmarks = Column(JSON, nullable=False)
    lesson_id = Column(Integer, ForeignKey('lessons.id', ondelete='SET NULL'), index=True, nullable=True)
    created_at = Column(DateTime(), server_default=func.now())

    lesson = relationship('Lesson', back_populates='signs')


class PracticeSession(Base):
    __tablename__ = 'practice_sessions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    learner_id = Column(Integer, index=True, nullable=False)
    lesson_id = Column(Integer, ForeignKey('lessons.id', ondelete='SET NULL'), nullable=True)
    start_date = Column(DateTime(), server_default=func.now())
    end_date = Column(DateTime, nullable=True)
    total_score = Column(Float, nullable=False, default=0.0)

    attempts = relationship(
        'Attempt', back_populates='session', cascade='all, delete-orphan', order_by='Attempt.id'
    )


class Attempt(Base):
    __tablename__ = 'attempts'

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey('practice_sessions.id'), nullable=False)
    sign_id = Column(Integer, ForeignKey('sign_samples.id'), nullable=False)
    score = Column(Float, nullable=False)
    feedback = Column(Text, nullable=True)
    record_motion_data = Column(JSON, nullable=True)
    created_at = Column(DateTime(), server_default=func.now())

    session = relationship('PracticeSession', back_populates='attempts')
    sign = relationship('SignSample')

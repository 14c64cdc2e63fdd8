from jogo_empatia import db
from datetime import datetime, timezone

RESULT_PENDING = 'pending'
RESULT_SENT = 'sent'
RESULT_FAILED = 'failed'
RESULT_DISCARDED = 'discarded'


def _utcnow():
    return datetime.now(timezone.utc)


class GameResult(db.Model):
    """One completed playthrough and what happened to its card submission."""
    __tablename__ = 'game_result'
    id = db.Column(db.Integer, primary_key=True)
    total_score = db.Column(db.Integer, nullable=False, default=0)
    skill1 = db.Column(db.Integer, nullable=False, default=0)  # empathy
    skill2 = db.Column(db.Integer, nullable=False, default=0)  # active listening
    skill3 = db.Column(db.Integer, nullable=False, default=0)  # self-awareness
    nfc_id = db.Column(db.String(64), nullable=True, index=True)
    status = db.Column(db.String(16), nullable=False, default=RESULT_PENDING)  # pending, sent, failed, discarded
    error = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'total_score': self.total_score,
            'skills': {
                'empathy': self.skill1,
                'active_listening': self.skill2,
                'self_awareness': self.skill3,
            },
            'nfc_id': self.nfc_id,
            'status': self.status,
            'error': self.error,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

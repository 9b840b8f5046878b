# authcore/models/credential_history.py
"""Credential History model
Tracks previous credentials to enforce the password non-reuse policy
"""
from authcore.extensions import db
from authcore.utils.clock import utcnow


class CredentialHistory(db.Model):
    """
    A retired credential. Rows are kept most-recent-first and trimmed to the
    policy's history size whenever a credential is rotated.
    """
    __tablename__ = 'credential_history'

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.String(36), db.ForeignKey('accounts.id'), nullable=False, index=True)

    # Stored password components (never plaintext)
    password_hash = db.Column(db.String(256), nullable=False)
    salt = db.Column(db.String(256), nullable=False)

    # Temporal tracking
    created_at = db.Column(db.DateTime, nullable=False)
    retired_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<CredentialHistory account_id={self.account_id} created_at={self.created_at}>'

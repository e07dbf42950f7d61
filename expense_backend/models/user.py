from datetime import datetime

from passlib.hash import pbkdf2_sha256 as hasher

from ..extensions import db


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(120), nullable=False)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    # Only ever written through set_password()
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    expenses = db.relationship(
        "Expense", back_populates="owner", cascade="all, delete-orphan"
    )

    def set_password(self, raw: str) -> None:
        """Hash ``raw`` with a fresh salt and store it.

        Hashing is an explicit step: saving a user whose password did not
        change never re-hashes the stored value.
        """
        self.password_hash = hasher.hash(raw)

    def check_password(self, raw: str) -> bool:
        if not self.password_hash or not raw:
            return False
        return hasher.verify(raw, self.password_hash)

    @classmethod
    def find_by_identifier(cls, identifier: str):
        """Look up a user by email or username."""
        return cls.query.filter(
            db.or_(cls.email == identifier, cls.username == identifier)
        ).first()

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"

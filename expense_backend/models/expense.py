from datetime import datetime

from ..extensions import db


def _iso(ts):
    return ts.isoformat() + "Z" if ts else None


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    amount = db.Column(db.Float, nullable=False)
    date = db.Column(db.Date, nullable=False, index=True)
    category = db.Column(db.String(80), nullable=False)
    image_url = db.Column(db.String(1024), nullable=True)

    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    owner = db.relationship("User", back_populates="expenses")

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Payload keys accepted from clients -> column names
    WRITABLE_FIELDS = {
        "title": "title",
        "description": "description",
        "amount": "amount",
        "date": "date",
        "category": "category",
        "imageUrl": "image_url",
    }

    @classmethod
    def owned_by(cls, user_id):
        return cls.query.filter(cls.user_id == user_id)

    @classmethod
    def get_owned(cls, expense_id, user_id):
        """Return the expense if it exists and belongs to ``user_id``, else None."""
        try:
            pk = int(expense_id)
        except (TypeError, ValueError):
            return None
        return cls.owned_by(user_id).filter(cls.id == pk).first()

    def apply(self, data: dict) -> None:
        """Merge validated payload values onto the record."""
        for key, attr in self.WRITABLE_FIELDS.items():
            if key in data:
                setattr(self, attr, data[key])

    def serialize(self):
        return {
            "_id": str(self.id),
            "title": self.title,
            "description": self.description,
            "amount": self.amount,
            "date": self.date.isoformat() if self.date else None,
            "category": self.category,
            "userId": str(self.user_id),
            "imageUrl": self.image_url,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Expense id={self.id} title={self.title!r} user_id={self.user_id}>"

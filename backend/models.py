import uuid
from datetime import datetime, timezone
from flask_sqlalchemy import SQLAlchemy
db = SQLAlchemy()


def _now():
    return datetime.now(timezone.utc)


class Tree(db.Model):
    __tablename__ = "trees"
    # dedup key: one canonical tree per (name, species, student_id)
    __table_args__ = (
        db.UniqueConstraint("name", "species", "student_id", name="uq_trees_name_species_student"),
    )

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), nullable=False)
    species = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(1024), nullable=False)
    css_style = db.Column(db.String(255), nullable=False)
    student_id = db.Column(db.String(255), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_now)
    ratings = db.relationship('Rating', lazy=True)

    def to_dict(self, embed=()):
        data = {
            "id": str(self.id),
            "name": self.name,
            "species": self.species,
            "description": self.description,
            "image_url": self.image_url,
            "css_style": self.css_style,
            "student_id": self.student_id,
            "created_at": _iso(self.created_at),
        }
        if "ratings" in embed:
            data["ratings"] = [r.to_dict() for r in self.ratings]
        return data


class Duplicate(db.Model):
    __tablename__ = "duplicates"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    tree_id = db.Column(db.Uuid, db.ForeignKey('trees.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    species = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(1024), nullable=False)
    css_style = db.Column(db.String(255), nullable=False)
    student_id = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_now)

    def to_dict(self, embed=()):
        return {
            "id": str(self.id),
            "tree_id": str(self.tree_id),
            "name": self.name,
            "species": self.species,
            "description": self.description,
            "image_url": self.image_url,
            "css_style": self.css_style,
            "student_id": self.student_id,
            "created_at": _iso(self.created_at),
        }


class Rating(db.Model):
    __tablename__ = "ratings"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    tree_id = db.Column(db.Uuid, db.ForeignKey('trees.id'), nullable=False, index=True)
    student_id = db.Column(db.String(255), nullable=False)
    rating = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_now)

    def to_dict(self, embed=()):
        return {
            "id": str(self.id),
            "tree_id": str(self.tree_id),
            "student_id": self.student_id,
            "rating": self.rating,
            "created_at": _iso(self.created_at),
        }


def _iso(value):
    if value is None:
        return None
    # SQLite drops the offset; stored values are always UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()

from datetime import datetime
import uuid
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _new_id():
    return str(uuid.uuid4())


class OriginSettingsRecord(db.Model):
    __tablename__ = "origin_settings"
    # Single row; the id is fixed
    id = db.Column(db.Integer, primary_key=True, default=1)
    postcode = db.Column(db.String(10))
    suburb = db.Column(db.String(120))
    state = db.Column(db.String(20))
    country = db.Column(db.String(2))
    theme_preference = db.Column(db.String(10))
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)


class ItemRecord(db.Model):
    __tablename__ = "items"
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), unique=True, index=True, nullable=False, default=_new_id)
    name = db.Column(db.String(255), unique=True, nullable=False)
    description = db.Column(db.Text)
    unit_weight_grams = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class PackagingRecord(db.Model):
    __tablename__ = "packaging"
    seq = db.Column(db.Integer, primary_key=True, autoincrement=True)
    id = db.Column(db.String(36), unique=True, index=True, nullable=False, default=_new_id)
    name = db.Column(db.String(255), unique=True, nullable=False)
    description = db.Column(db.Text)
    length_cm = db.Column(db.Integer, nullable=False)
    width_cm = db.Column(db.Integer, nullable=False)
    height_cm = db.Column(db.Integer, nullable=False)
    internal_volume_cubic_cm = db.Column(db.Integer, nullable=False)
    packaging_cost_aud = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

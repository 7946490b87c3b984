from datetime import datetime
from sqlalchemy.orm import declared_attr
from .extensions import db, bcrypt

ROLES = ("user", "admin")
LISTING_STATUSES = ("active", "sold", "pending")


class TimestampMixin:
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class User(db.Model, TimestampMixin):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)
    role = db.Column(db.String(20), nullable=False, default="user")  # user|admin

    def set_password(self, raw):
        self.password_hash = bcrypt.generate_password_hash(raw).decode()

    def check_password(self, raw):
        return bcrypt.check_password_hash(self.password_hash, raw)


class ListingMixin:
    """Columns shared by every listing table."""

    id = db.Column(db.Integer, primary_key=True)
    price = db.Column(db.Numeric(12, 2), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    image_urls = db.Column(db.JSON, nullable=False, default=lambda: [])
    status = db.Column(db.String(20), nullable=False, default="active", index=True)  # active|sold|pending
    location = db.Column(db.String(255), nullable=True)
    is_best_offer = db.Column(db.Boolean, nullable=False, default=False)

    @declared_attr
    def seller_id(cls):
        return db.Column(
            db.Integer,
            db.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def seller(cls):
        return db.relationship("User")


class VehicleMixin(ListingMixin):
    make = db.Column(db.String(100), nullable=True)
    model = db.Column(db.String(255), nullable=False)
    year = db.Column(db.Integer, nullable=False, index=True)
    body_type = db.Column(db.String(50), nullable=True)
    fuel_type = db.Column(db.String(50), nullable=True)
    transmission = db.Column(db.String(50), nullable=True)
    engine = db.Column(db.String(255), nullable=True)
    color = db.Column(db.String(50), nullable=True)
    co2_emissions = db.Column(db.String(50), nullable=True)
    mileage = db.Column(db.Integer, nullable=True)
    vin_number = db.Column(db.String(100), nullable=True)
    equipment = db.Column(db.JSON, nullable=False, default=lambda: [])
    cylindrics = db.Column(db.Integer, nullable=True)
    hp_kw = db.Column(db.String(50), nullable=True)

    @declared_attr
    def __table_args__(cls):
        t = cls.__tablename__
        return (
            db.Index(f"idx_{t}_make_model", "make", "model"),
            db.Index(f"idx_{t}_body_type", "body_type"),
            db.Index(f"idx_{t}_fuel_type", "fuel_type"),
        )


class Car(db.Model, VehicleMixin, TimestampMixin):
    __tablename__ = "cars"
    doors = db.Column(db.Integer, nullable=True)


class Bike(db.Model, VehicleMixin, TimestampMixin):
    __tablename__ = "bikes"


class Truck(db.Model, VehicleMixin, TimestampMixin):
    __tablename__ = "trucks"
    doors = db.Column(db.Integer, nullable=True)


class Part(db.Model, ListingMixin, TimestampMixin):
    __tablename__ = "parts"
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    brand = db.Column(db.String(100), nullable=False)
    compatibility = db.Column(db.String(255), nullable=False)
    condition = db.Column(db.String(50), nullable=False)
    warranty = db.Column(db.String(100), nullable=False)


class Favorite(db.Model):
    __tablename__ = "favorites"
    __table_args__ = (
        db.UniqueConstraint("user_id", "car_id", name="uq_favorites_user_car"),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    car_id = db.Column(db.Integer, db.ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    car = db.relationship("Car")


class Inquiry(db.Model):
    __tablename__ = "inquiries"
    id = db.Column(db.Integer, primary_key=True)
    car_id = db.Column(db.Integer, db.ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True)
    buyer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    seller_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    car = db.relationship("Car")
    buyer = db.relationship("User", foreign_keys=[buyer_id])
    seller = db.relationship("User", foreign_keys=[seller_id])


# Provisioned for the recently-viewed and saved-search features; no route uses them yet.
class RecentlyViewed(db.Model):
    __tablename__ = "recently_viewed"
    __table_args__ = (
        db.UniqueConstraint("user_id", "car_id", name="uq_recently_viewed_user_car"),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    car_id = db.Column(db.Integer, db.ForeignKey("cars.id", ondelete="CASCADE"), nullable=False)
    viewed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)


class SearchAlert(db.Model):
    __tablename__ = "search_alerts"
    __table_args__ = (
        db.UniqueConstraint("user_id", "category", name="uq_search_alerts_user_category"),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    category = db.Column(db.String(20), nullable=False)
    criteria = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

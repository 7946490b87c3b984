"""Listing categories.

Cars, bikes, trucks and parts share one set of handlers; a ``Category``
describes everything that differs between them: the model, which request
fields are writable (and how each is coerced), which are mandatory on
create, which query-string filters the list endpoint understands and how a
row is rendered.
"""
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from sqlalchemy import func
from .errors import ValidationError
from .models import Bike, Car, LISTING_STATUSES, Part, Truck
from .utils import iso

# canonical field -> camelCase name also accepted on input
ALIASES = {
    "make": "manufacturer",
    "year": "fabrication",
    "body_type": "bodyType",
    "fuel_type": "fuelType",
    "co2_emissions": "co2Emissions",
    "vin_number": "vinNumber",
    "hp_kw": "hpKw",
    "is_best_offer": "isBestOffer",
}

PRICE_MESSAGE = "Price must be a positive number."
CENT = Decimal("0.01")
# DECIMAL(12,2) holds at most ten integer digits
MAX_PRICE = Decimal("1e10")
MIN_YEAR = 1900


# --- coercers: (field name, raw value) -> stored value ---

def text(name, value):
    if value is None or value == "":
        return None
    return str(value)


def required_text(name, value):
    if value is None or str(value).strip() == "":
        raise ValidationError(f"{name} cannot be empty.")
    return str(value)


def integer(name, value):
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer.")
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{name} must be an integer.")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{name} must be an integer.")


def price(name, value):
    if value is None or isinstance(value, bool):
        raise ValidationError(PRICE_MESSAGE)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(PRICE_MESSAGE)
    if not amount.is_finite() or abs(amount) >= MAX_PRICE:
        raise ValidationError(PRICE_MESSAGE)
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount <= 0 or amount >= MAX_PRICE:
        raise ValidationError(PRICE_MESSAGE)
    return amount


def year(name, value):
    max_year = date.today().year + 1
    message = f"Year must be between {MIN_YEAR} and {max_year}."
    try:
        parsed = integer(name, value)
    except ValidationError:
        raise ValidationError(message)
    if parsed is None or not MIN_YEAR <= parsed <= max_year:
        raise ValidationError(message)
    return parsed


def string_list(name, value):
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value] if value else []


def flag(name, value):
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def status(name, value):
    if value not in LISTING_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(LISTING_STATUSES)}.")
    return value


COMMON_FIELDS = {
    "price": price,
    "description": text,
    "image_urls": string_list,
    "status": status,
    "location": text,
    "is_best_offer": flag,
}

VEHICLE_FIELDS = {
    "make": text,
    "model": required_text,
    "year": year,
    **COMMON_FIELDS,
    "body_type": text,
    "fuel_type": text,
    "transmission": text,
    "engine": text,
    "color": text,
    "co2_emissions": text,
    "mileage": integer,
    "vin_number": text,
    "equipment": string_list,
    "cylindrics": integer,
    "hp_kw": text,
}

DOORED_VEHICLE_FIELDS = {**VEHICLE_FIELDS, "doors": integer}

PART_FIELDS = {
    "name": required_text,
    **COMMON_FIELDS,
    "category": required_text,
    "brand": required_text,
    "compatibility": required_text,
    "condition": required_text,
    "warranty": required_text,
}


@dataclass(frozen=True)
class Filter:
    param: str
    column: str
    op: str  # min | max | like | iexact | eq_int

    def condition(self, model, raw):
        column = getattr(model, self.column)
        if self.op in ("min", "max"):
            try:
                bound = float(raw)
            except ValueError:
                return None
            return column >= bound if self.op == "min" else column <= bound
        if self.op == "eq_int":
            try:
                return column == int(raw)
            except ValueError:
                return None
        if self.op == "like":
            return func.lower(column).contains(raw.lower(), autoescape=True)
        return func.lower(column) == raw.lower()


PRICE_FILTERS = (
    Filter("minPrice", "price", "min"),
    Filter("maxPrice", "price", "max"),
)

VEHICLE_FILTERS = PRICE_FILTERS + (
    Filter("make", "make", "like"),
    Filter("model", "model", "like"),
    Filter("year", "year", "eq_int"),
    Filter("bodyType", "body_type", "iexact"),
    Filter("fuelType", "fuel_type", "iexact"),
    Filter("transmission", "transmission", "iexact"),
)

PART_FILTERS = PRICE_FILTERS + (
    Filter("brand", "brand", "like"),
    Filter("category", "category", "iexact"),
    Filter("condition", "condition", "iexact"),
)


@dataclass(frozen=True)
class Category:
    key: str
    singular: str
    model: type
    fields: dict
    required: tuple
    required_message: str
    filters: tuple

    @property
    def label(self):
        return self.singular.capitalize()

    @property
    def is_vehicle(self):
        return "year" in self.fields

    # --- input ---

    def canonicalize(self, data):
        """Picks the writable fields out of ``data``; snake_case beats its camelCase alias."""
        values = {}
        for name in self.fields:
            alias = ALIASES.get(name)
            if data.get(name) is not None:
                values[name] = data[name]
            elif alias and data.get(alias) is not None:
                values[name] = data[alias]
            elif name in data or (alias and alias in data):
                values[name] = None
        return values

    def clean(self, values):
        return {name: self.fields[name](name, value) for name, value in values.items()}

    def creation_values(self, data):
        values = {k: v for k, v in self.canonicalize(data).items() if v is not None}
        if any(not values.get(name) for name in self.required):
            raise ValidationError(self.required_message)
        values = self.clean(values)
        values.setdefault("status", "active")
        values.setdefault("image_urls", [])
        values.setdefault("is_best_offer", False)
        if self.is_vehicle:
            values.setdefault("equipment", [])
        return values

    def update_values(self, data):
        return self.clean(self.canonicalize(data))

    def conditions(self, args, default_status="active"):
        conds = []
        wanted = args.get("status") or default_status
        if wanted != "all":
            conds.append(self.model.status == wanted)
        for f in self.filters:
            raw = args.get(f.param)
            if raw:
                cond = f.condition(self.model, raw)
                if cond is not None:
                    conds.append(cond)
        return conds

    # --- output ---

    def serialize(self, row, seller=False, seller_email=False):
        data = {"id": row.id, "seller_id": row.seller_id}
        if seller:
            owner = row.seller
            data["seller"] = {
                "name": owner.name if owner else None,
                "phone": owner.phone if owner else None,
            }
            if seller_email:
                data["seller"]["email"] = owner.email if owner else None
        for name in self.fields:
            data[name] = getattr(row, name)
        images = row.image_urls or []
        data["price"] = float(row.price) if row.price is not None else None
        data["image_urls"] = images
        data["created_at"] = iso(row.created_at)
        data["updated_at"] = iso(row.updated_at)

        # camelCase mirror used by the web client
        data["imageUrl"] = images[0] if images else None
        data["images"] = images
        data["isBestOffer"] = row.is_best_offer
        if self.is_vehicle:
            data["equipment"] = row.equipment or []
            data["name"] = " ".join(p for p in (row.make, row.model) if p)
            data["fabrication"] = str(row.year) if row.year else None
            data["bodyType"] = row.body_type
            data["fuel"] = row.fuel_type
            data["co2Emissions"] = row.co2_emissions
            data["vinNumber"] = row.vin_number
            data["hpKw"] = row.hp_kw
        return data


VEHICLE_REQUIRED = ("model", "year", "price")
VEHICLE_REQUIRED_MESSAGE = "Model, year, and price are required fields."

CATEGORIES = {
    "cars": Category(
        "cars", "car", Car, DOORED_VEHICLE_FIELDS,
        VEHICLE_REQUIRED, VEHICLE_REQUIRED_MESSAGE, VEHICLE_FILTERS,
    ),
    "bikes": Category(
        "bikes", "bike", Bike, VEHICLE_FIELDS,
        VEHICLE_REQUIRED, VEHICLE_REQUIRED_MESSAGE, VEHICLE_FILTERS,
    ),
    "trucks": Category(
        "trucks", "truck", Truck, DOORED_VEHICLE_FIELDS,
        VEHICLE_REQUIRED, VEHICLE_REQUIRED_MESSAGE, VEHICLE_FILTERS,
    ),
    "parts": Category(
        "parts", "part", Part, PART_FIELDS,
        ("name", "price", "category", "brand", "compatibility", "condition", "warranty"),
        "Name, price, category, brand, compatibility, condition, and warranty are required.",
        PART_FILTERS,
    ),
}


def resolve_category(key):
    try:
        return CATEGORIES[key]
    except KeyError:
        raise ValidationError("Invalid category.")

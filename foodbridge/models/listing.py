from foodbridge import db
from foodbridge.models.user import new_id
from foodbridge.utils.clock import now_ms


DIETARY_FIELDS = {
	"isVegetarian": "is_vegetarian",
	"isVegan": "is_vegan",
	"containsNuts": "contains_nuts",
	"containsGluten": "contains_gluten",
	"containsDairy": "contains_dairy",
}


class FoodListing(db.Model):
	__tablename__ = "food_listings"

	id = db.Column(db.String(36), primary_key=True, default=new_id)
	hotel_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
	hotel_name = db.Column(db.String(120), nullable=False)
	food_name = db.Column(db.String(150), nullable=False)
	description = db.Column(db.Text, nullable=False, default="")
	quantity = db.Column(db.Float, nullable=False)
	quantity_unit = db.Column(db.String(30), nullable=False, default="servings")
	created_at = db.Column(db.BigInteger, nullable=False, default=now_ms)
	preparation_time = db.Column(db.BigInteger, nullable=False)
	expiry_time = db.Column(db.BigInteger, nullable=False, index=True)
	fssai_number = db.Column(db.String(40), nullable=False, default="FSSAI-PENDING")
	is_vegetarian = db.Column(db.Boolean, nullable=False, default=False)
	is_vegan = db.Column(db.Boolean, nullable=False, default=False)
	contains_nuts = db.Column(db.Boolean, nullable=False, default=False)
	contains_gluten = db.Column(db.Boolean, nullable=False, default=False)
	contains_dairy = db.Column(db.Boolean, nullable=False, default=False)
	address = db.Column(db.String(255), nullable=False, default="")
	latitude = db.Column(db.Float, nullable=True)
	longitude = db.Column(db.Float, nullable=True)
	status = db.Column(db.String(20), nullable=False, default="available", index=True)
	assigned_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
	assigned_name = db.Column(db.String(120), nullable=True)
	assigned_role = db.Column(db.String(20), nullable=True)
	version = db.Column(db.Integer, nullable=False, default=1)

	collections = db.relationship("FoodCollection", backref="listing", lazy=True)

	@property
	def assigned_to(self):
		if not self.assigned_id:
			return None
		return {"id": self.assigned_id, "name": self.assigned_name, "role": self.assigned_role}

	@property
	def has_location(self):
		return self.latitude is not None and self.longitude is not None

	def is_expired(self, at_ms=None):
		return self.expiry_time <= (now_ms() if at_ms is None else at_ms)

	def to_dict(self):
		return {
			"id": self.id,
			"hotelId": self.hotel_id,
			"hotelName": self.hotel_name,
			"foodName": self.food_name,
			"description": self.description,
			"quantity": self.quantity,
			"quantityUnit": self.quantity_unit,
			"createdAt": self.created_at,
			"preparationTime": self.preparation_time,
			"expiryTime": self.expiry_time,
			"fssaiNumber": self.fssai_number,
			"dietaryInfo": {key: bool(getattr(self, column)) for key, column in DIETARY_FIELDS.items()},
			"location": {"address": self.address, "lat": self.latitude, "lng": self.longitude},
			"status": self.status,
			"assignedTo": self.assigned_to,
			"version": self.version,
		}

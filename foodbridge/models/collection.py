from sqlalchemy import text

from foodbridge import db
from foodbridge.models.user import new_id
from foodbridge.utils.clock import now_ms


OPEN_ONLY = text("status != 'cancelled'")


class FoodCollection(db.Model):
	__tablename__ = "food_collections"
	__table_args__ = (
		# At most one non-cancelled collection may point at a listing.
		db.Index(
			"uq_food_collections_active_listing",
			"food_listing_id",
			unique=True,
			sqlite_where=OPEN_ONLY,
			postgresql_where=OPEN_ONLY,
		),
	)

	id = db.Column(db.String(36), primary_key=True, default=new_id)
	food_listing_id = db.Column(db.String(36), db.ForeignKey("food_listings.id"), nullable=False)
	hotel_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
	ngo_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True, index=True)
	volunteer_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True, index=True)
	pickup_time = db.Column(db.BigInteger, nullable=False)
	delivery_time = db.Column(db.BigInteger, nullable=True)
	status = db.Column(db.String(20), nullable=False, default="scheduled")
	notes = db.Column(db.Text, nullable=True)
	pickup_code = db.Column(db.String(6), nullable=True)
	created_at = db.Column(db.BigInteger, nullable=False, default=now_ms)

	@property
	def claimant_id(self):
		return self.ngo_id or self.volunteer_id

	def to_dict(self, include_code=False):
		payload = {
			"id": self.id,
			"foodListingId": self.food_listing_id,
			"hotelId": self.hotel_id,
			"ngoId": self.ngo_id,
			"volunteerId": self.volunteer_id,
			"pickupTime": self.pickup_time,
			"deliveryTime": self.delivery_time,
			"status": self.status,
			"notes": self.notes,
			"createdAt": self.created_at,
		}
		if include_code:
			payload["pickupCode"] = self.pickup_code
		return payload

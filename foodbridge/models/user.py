from uuid import uuid4

from sqlalchemy.orm import validates
from werkzeug.security import check_password_hash, generate_password_hash

from foodbridge import db
from foodbridge.utils.clock import now_ms


def new_id():
    return uuid4().hex


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(20), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    address = db.Column(db.String(255), nullable=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    profile_complete = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_ms)

    __mapper_args__ = {"polymorphic_on": role}

    # Fields each role variant lets the owner edit from profile setup.
    profile_fields = ()

    @validates("role")
    def _role_is_immutable(self, key, value):
        if self.role is not None and value != self.role:
            raise ValueError("A user's role cannot change after registration.")
        return value

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password or "")

    def profile_dict(self):
        return {}

    def to_dict(self):
        location = None
        if self.latitude is not None and self.longitude is not None:
            location = {"lat": self.latitude, "lng": self.longitude}

        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "phone": self.phone,
            "address": self.address,
            "location": location,
            "profileComplete": self.profile_complete,
            "createdAt": self.created_at,
            **self.profile_dict(),
        }


class HotelProfile(User):
    __tablename__ = "hotel_profiles"

    id = db.Column(db.String(36), db.ForeignKey("users.id"), primary_key=True)
    fssai_number = db.Column(db.String(40), nullable=True)
    contact_person = db.Column(db.String(120), nullable=True)
    business_type = db.Column(db.String(20), nullable=False, default="hotel")

    __mapper_args__ = {"polymorphic_identity": "hotel"}

    profile_fields = ("fssai_number", "contact_person", "business_type")
    business_types = {"hotel", "restaurant", "shop", "other"}

    def profile_dict(self):
        return {
            "fssaiNumber": self.fssai_number,
            "contactPerson": self.contact_person,
            "businessType": self.business_type,
        }


class NgoProfile(User):
    __tablename__ = "ngo_profiles"

    id = db.Column(db.String(36), db.ForeignKey("users.id"), primary_key=True)
    registration_number = db.Column(db.String(60), nullable=True)
    contact_person = db.Column(db.String(120), nullable=True)
    beneficiary_count = db.Column(db.Integer, nullable=False, default=0)

    __mapper_args__ = {"polymorphic_identity": "ngo"}

    profile_fields = ("registration_number", "contact_person", "beneficiary_count")

    def profile_dict(self):
        return {
            "registrationNumber": self.registration_number,
            "contactPerson": self.contact_person,
            "beneficiaryCount": self.beneficiary_count,
        }


class VolunteerProfile(User):
    __tablename__ = "volunteer_profiles"

    id = db.Column(db.String(36), db.ForeignKey("users.id"), primary_key=True)
    availability = db.Column(db.JSON, nullable=False, default=dict)
    training_completed = db.Column(db.Boolean, nullable=False, default=False)
    active_area = db.Column(db.String(120), nullable=True)

    __mapper_args__ = {"polymorphic_identity": "volunteer"}

    profile_fields = ("availability", "training_completed", "active_area")

    def profile_dict(self):
        return {
            "availability": self.availability or {},
            "trainingCompleted": self.training_completed,
            "activeArea": self.active_area,
        }


class AdminProfile(User):
    __tablename__ = "admin_profiles"

    id = db.Column(db.String(36), db.ForeignKey("users.id"), primary_key=True)
    permissions = db.Column(db.JSON, nullable=False, default=list)

    __mapper_args__ = {"polymorphic_identity": "admin"}

    profile_fields = ("permissions",)

    def profile_dict(self):
        return {"permissions": list(self.permissions or [])}


USER_CLASSES = {
    "hotel": HotelProfile,
    "ngo": NgoProfile,
    "volunteer": VolunteerProfile,
    "admin": AdminProfile,
}

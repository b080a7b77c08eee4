from flask import Blueprint, g, jsonify, session

from foodbridge import db, limiter
from foodbridge.errors import AuthenticationRequired
from foodbridge.models.user import User
from foodbridge.services.profile_service import authenticate, complete_profile, register_user
from foodbridge.utils.decorators import login_required
from foodbridge.utils.payload import request_data

auth = Blueprint("auth", __name__)

HOME_BY_ROLE = {
    "hotel": "/listings?mine=1",
    "ngo": "/listings",
    "volunteer": "/listings",
    "admin": "/admin/overview",
}


def _start_session(user):
    session.clear()
    session["user_id"] = user.id
    session["role"] = user.role
    session["display_name"] = user.name
    session.permanent = True


@auth.route("/register", methods=["POST"])
@limiter.limit("20 per hour")
def register():
    data = request_data()
    user = register_user(
        email=data.get("email"),
        password=data.get("password"),
        name=data.get("name") or data.get("full_name"),
        role=data.get("role"),
        phone=data.get("phone"),
    )
    _start_session(user)
    return jsonify({"ok": True, "user": user.to_dict(), "next": "/profile"}), 201


@auth.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    data = request_data()
    user = authenticate(data.get("email") or data.get("identifier"), data.get("password"))
    if user is None:
        raise AuthenticationRequired("Username or password is wrong.")

    _start_session(user)
    next_url = HOME_BY_ROLE.get(user.role, "/") if user.profile_complete else "/profile"
    return jsonify({"ok": True, "user": user.to_dict(), "next": next_url})


@auth.route("/logout")
def logout():
    session.clear()
    return jsonify({"ok": True, "message": "Logged out successfully."})


@auth.route("/me")
@login_required
def me():
    user = db.session.get(User, g.identity.user_id)
    if user is None:
        session.clear()
        raise AuthenticationRequired()
    return jsonify({"ok": True, "user": user.to_dict()})


@auth.route("/profile", methods=["POST"])
@login_required
def profile_setup():
    user = db.session.get(User, g.identity.user_id)
    if user is None:
        session.clear()
        raise AuthenticationRequired()

    user = complete_profile(user, request_data())
    session["display_name"] = user.name
    return jsonify({"ok": True, "user": user.to_dict()})

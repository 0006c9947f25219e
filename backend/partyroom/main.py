from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user

from partyroom.services.accounts.identity import issue_token
from partyroom.services.accounts.profiles import authenticate, register_user, update_profile

main = Blueprint('main', __name__)


@main.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    user = register_user(data.get('email'), data.get('password'), data.get('name') or data.get('display_name'))
    login_user(user)
    current_app.logger.info(f"[register] user={user.id}")
    return jsonify({"success": True, "user": user.to_dict(), "token": issue_token(user)}), 201


@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = authenticate(data.get('email') or data.get('username'), data.get('password'))
    login_user(user, remember=True)
    return jsonify({"success": True, "user": user.to_dict(), "token": issue_token(user)})


@main.route('/me')
@login_required
def me():
    return jsonify({"success": True, "user": current_user.to_dict()})


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})


@main.route('/profile', methods=['PUT'])
@login_required
def profile():
    user = update_profile(current_user, request.get_json(silent=True) or {})
    current_app.logger.info(f"[profile] user={user.id}")
    return jsonify({"success": True, "user": user.to_dict()})

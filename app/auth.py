from flask import Blueprint, jsonify, request
from flask_login import login_user, logout_user, login_required, current_user
from app.data.core.user_info.user import User
from app import limiter
from app.utils.logger import get_logger

logger = get_logger("field_ops.auth")
auth = Blueprint('auth', __name__)


@auth.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    data = request.get_json(silent=True) or request.form
    username = data.get('username')
    password = data.get('password')

    if not username or not password:
        logger.warning(f"Login attempt with missing credentials for username: {username}")
        return jsonify({'error': 'Username and password are required'}), 400

    user = User.query.filter_by(username=username).first()

    if user is None or not user.check_password(password):
        logger.warning(f"Failed login attempt for username: {username}")
        return jsonify({'error': 'Invalid username or password'}), 401

    if not user.is_active:
        logger.warning(f"Login attempt for disabled account: {username}")
        return jsonify({'error': 'Account is disabled'}), 403

    login_user(user)
    logger.info(f"Successful login for user: {username}")
    return jsonify(_user_payload(user))


@auth.route('/logout', methods=['POST'])
@login_required
def logout():
    username = current_user.username
    logout_user()
    logger.info(f"User logged out: {username}")
    return jsonify({'status': 'logged out'})


@auth.route('/me')
@login_required
def me():
    return jsonify(_user_payload(current_user))


def _user_payload(user):
    return {
        'id': user.id,
        'username': user.username,
        'name': user.name,
        'role': user.role,
        'location_id': user.location_id,
    }

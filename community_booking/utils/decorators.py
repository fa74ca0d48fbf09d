from dataclasses import dataclass
from functools import wraps
from typing import Optional
from flask import request, jsonify, current_app
import jwt


@dataclass(frozen=True)
class CurrentUser:
    """Identity asserted by the identity provider's token. Trusted as given."""
    id: str
    name: Optional[str] = None


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None
        if 'Authorization' in request.headers:
            # Bearer <token>
            auth_header = request.headers['Authorization']
            if auth_header.startswith("Bearer "):
                token = auth_header.split(" ", 1)[1].strip()

        if not token:
            return jsonify({'message': 'Token is missing!'}), 401

        try:
            data = jwt.decode(token, current_app.config['SECRET_KEY'], algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            return jsonify({'message': 'Token is invalid!', 'error': str(e)}), 401

        user_id = data.get('user_id')
        if user_id is None or str(user_id) == '':
            return jsonify({'message': 'Token is invalid!', 'error': 'user_id claim missing'}), 401

        current_user = CurrentUser(id=str(user_id), name=data.get('name'))
        return f(current_user, *args, **kwargs)

    return decorated

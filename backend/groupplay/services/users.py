from flask import current_app

from groupplay import db
from groupplay.errors import ValidationError
from groupplay.models import User, utcnow
from groupplay.services import commit

PROFILE_FIELDS = ('username', 'email', 'first_name', 'last_name', 'profile_image_url')


def upsert_user(user_id, password=None, **profile):
    """Insert the user if absent, else overwrite the given profile fields.

    ``updated_at`` is refreshed on every call. Users are never deleted.
    """
    unknown = set(profile) - set(PROFILE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown profile fields: {', '.join(sorted(unknown))}")

    user = db.session.get(User, user_id) if user_id else None
    created = user is None
    if created:
        user = User(id=user_id) if user_id else User()
        db.session.add(user)

    for field, value in profile.items():
        setattr(user, field, value)
    if password:
        user.set_password(password)
    user.updated_at = utcnow()

    commit('Username already exists')
    current_app.logger.info("%s user %s", 'Created' if created else 'Updated', user.id)
    return user


def find_by_username(username):
    return User.query.filter_by(username=username).first()

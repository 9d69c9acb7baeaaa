"""Account store consumed by the TokenAuthority."""
from models.user import User


class UserStore:
    """Looks up and persists User rows through a DBStorage."""

    def __init__(self, storage):
        self.storage = storage

    def find_by_identifier(self, user_id):
        return self.storage.get(User, user_id)

    def find_by_email(self, email):
        session = self.storage.get_session()
        return session.query(User).filter(User.email == email.strip().lower()).first()

    def save(self, user):
        # Last writer wins on the refresh_token column
        self.storage.new(user)
        self.storage.save()

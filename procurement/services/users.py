# users.py
from ..api import ApiClient
from ..models import User, UserUpdate, build, parse, payload


def get_user_by_id(client: ApiClient, user_id: int) -> User:
    return parse(User, client.get(f"/users/{user_id}").get("user"))


def update_user(client: ApiClient, user_id: int, **changes) -> User:
    data = build(UserUpdate, **changes)
    user = parse(User, client.put(f"/users/{user_id}", payload(data)).get("user"))
    # keep the persisted identity in step with profile edits
    current = client.session.get_current_user()
    token = client.session.get_token()
    if current is not None and token and current.id == user.id:
        client.session.begin(token, user)
    return user

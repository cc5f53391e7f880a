# app/models/user.py

from pydantic import BaseModel


class User(BaseModel):
    """The signed-in user handed to routes by the auth boundary."""

    id: str
    email: str = ""
    name: str = ""
    picture: str = ""


# Used when authentication is switched off (local, single-user installs)
LOCAL_USER = User(id="local", email="", name="Local user")

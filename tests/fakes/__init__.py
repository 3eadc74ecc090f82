"""Test fakes for mongorepo.

Driver fakes recording calls and replaying scripted results, so the
repository can be tested without a MongoDB server.
"""

from .collection import (
    FakeCollection,
    FakeCursor,
    FakeDatabase,
    FakeDeleteResult,
    FakeInsertResult,
    FakeUpdateResult,
)
from .entities import Profile, User

__all__ = [
    "User",
    "Profile",
    "FakeCollection",
    "FakeCursor",
    "FakeDatabase",
    "FakeInsertResult",
    "FakeUpdateResult",
    "FakeDeleteResult",
]

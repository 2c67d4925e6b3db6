"""Building response models straight from ORM entities."""

from types import SimpleNamespace

import pytest
from sqlalchemy import select

from edustack.core.database.entities.categories import Category
from edustack.core.database.entities.users import Role, Tutor, User
from edustack.core.models.io.categories import CategoryBrief
from edustack.core.models.io.common import is_entity, orm_fields
from edustack.core.models.io.courses import TutorBrief
from edustack.core.models.io.users import UserRead


@pytest.mark.parametrize(
    "value,expected",
    [
        (Category(name="Art", slug="art"), True),
        (Category, False),
        ({"name": "Art"}, False),
        (SimpleNamespace(name="Art"), False),
        (None, False),
    ],
)
def test_is_entity(value, expected):
    assert is_entity(value) is expected


def test_orm_fields_skips_unset_relationships():
    fields = orm_fields(Category(name="Art", slug="art"))
    assert fields["slug"] == "art"
    assert "children" not in fields
    assert "parent" not in fields


def test_user_roles_become_names():
    user = User(email="kim@example.com", username="kim", first_name="Kim", last_name="Lee", password_hash="x")
    user.roles = [Role(name="tutor"), Role(name="student")]

    read = UserRead.model_validate(user)

    assert read.roles == ["student", "tutor"]
    assert read.permissions == []
    assert "passwordHash" not in read.model_dump(by_alias=True)


@pytest.mark.asyncio
async def test_unloaded_relationship_is_left_out(in_memory_session, tutor, category):
    in_memory_session.expunge_all()
    loaded = (await in_memory_session.execute(select(Tutor).where(Tutor.id == tutor.id))).scalar_one()

    brief = TutorBrief.model_validate(loaded)

    assert brief.id == tutor.id
    assert brief.user is None
    assert CategoryBrief.model_validate(category).slug == "programming"

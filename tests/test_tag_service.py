import itertools

import pytest

from acrocat.auth.users import create_user
from acrocat.infra.models import Acronym, AcronymCategory, Category
from acrocat.infra.queries import categories_for_acronym
from acrocat.services.tag_service import clean_names, diff_tags, reconcile_tags

NAMES = ["Funny", "Informal", "Serious", "funny"]
SUBSETS = [set(c) for r in range(len(NAMES) + 1) for c in itertools.combinations(NAMES, r)]


@pytest.mark.parametrize("existing", SUBSETS[::3])
@pytest.mark.parametrize("desired", SUBSETS[::2])
def test_diff_is_the_two_set_differences(existing, desired):
    diff = diff_tags(existing, desired)
    assert diff.to_add == desired - existing
    assert diff.to_remove == existing - desired
    assert (existing - diff.to_remove) | diff.to_add == desired


def test_diff_against_itself_is_empty():
    diff = diff_tags({"Funny", "Informal"}, {"Informal", "Funny"})
    assert diff.empty


def test_diff_is_case_sensitive():
    diff = diff_tags({"Funny"}, {"funny"})
    assert diff.to_add == {"funny"}
    assert diff.to_remove == {"Funny"}


def test_clean_names_strips_and_collapses():
    assert clean_names(["Funny", " Funny ", "", "   ", "Serious"]) == {"Funny", "Serious"}
    assert clean_names(None) == set()


@pytest.fixture()
def acronym(db):
    user = create_user(db, name="Alice", username="alice", password="password123")
    a = Acronym(short="OMG", long="Oh My God", user=user)
    db.add(a)
    db.commit()
    return a


def _names(db, acronym):
    return {c.name for c in categories_for_acronym(db, acronym.id)}


def test_reconcile_from_empty_adds_everything(db, acronym):
    diff = reconcile_tags(db, acronym, ["Funny", "Informal", "Funny"])
    db.commit()
    assert diff.to_add == {"Funny", "Informal"}
    assert not diff.to_remove
    assert _names(db, acronym) == {"Funny", "Informal"}
    assert db.query(AcronymCategory).count() == 2


def test_reconcile_applies_minimal_changes(db, acronym):
    reconcile_tags(db, acronym, ["Funny", "Informal"])
    db.commit()
    funny_id = db.query(Category).filter_by(name="Funny").one().id

    diff = reconcile_tags(db, acronym, ["Funny", "Serious"])
    db.commit()

    assert diff.to_add == {"Serious"}
    assert diff.to_remove == {"Informal"}
    assert _names(db, acronym) == {"Funny", "Serious"}
    assert db.query(Category).filter_by(name="Funny").one().id == funny_id
    # Removing a tag keeps the category itself.
    assert db.query(Category).filter_by(name="Informal").count() == 1


def test_reconcile_with_same_set_is_a_no_op(db, acronym):
    reconcile_tags(db, acronym, ["Funny"])
    db.commit()
    diff = reconcile_tags(db, acronym, ["Funny"])
    assert diff.empty
    assert db.query(AcronymCategory).count() == 1


def test_reconcile_to_empty_removes_all(db, acronym):
    reconcile_tags(db, acronym, ["Funny", "Informal"])
    db.commit()
    diff = reconcile_tags(db, acronym, [])
    db.commit()
    assert diff.to_remove == {"Funny", "Informal"}
    assert _names(db, acronym) == set()
    assert db.query(Category).count() == 2


def test_reconcile_reuses_existing_categories(db, acronym):
    db.add(Category(name="Funny"))
    db.commit()
    reconcile_tags(db, acronym, ["Funny", "funny"])
    db.commit()
    assert db.query(Category).count() == 2
    assert _names(db, acronym) == {"Funny", "funny"}

"""Cascade Plan — tests for ordered deletion steps."""

from kondo.core.cascade_plan import DeletionImpact, plan_deletion
from kondo.core.domain_types import CascadeStep as S


def test_plain_item():
    plan = plan_deletion(DeletionImpact(can_delete=True, is_published=False))
    assert plan == [S.CHECK_IMPACT, S.DELETE_PARENT]


def test_published_item_deletes_children_then_post_then_parent():
    plan = plan_deletion(DeletionImpact(can_delete=True, is_published=True, import_count=3))
    assert plan == [S.CHECK_IMPACT, S.DELETE_CHILDREN, S.DELETE_POST, S.DELETE_PARENT]


def test_imported_item_releases_import():
    plan = plan_deletion(DeletionImpact(can_delete=True, is_published=False, is_imported=True))
    assert plan == [S.CHECK_IMPACT, S.RELEASE_IMPORT, S.DELETE_PARENT]


def test_published_imported_copy_runs_both_branches():
    plan = plan_deletion(DeletionImpact(can_delete=True, is_published=True, is_imported=True))
    assert plan == [
        S.CHECK_IMPACT, S.DELETE_CHILDREN, S.DELETE_POST,
        S.RELEASE_IMPORT, S.DELETE_PARENT,
    ]

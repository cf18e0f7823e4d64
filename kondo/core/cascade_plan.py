"""Cascade Plan — ordered deletion steps for a content item.

Invariants:
    - Every plan starts with CHECK_IMPACT and ends with DELETE_PARENT
    - Published item: children are deleted before the post, the post before the parent
    - Imported item: the origin post's counter is released before the parent is deleted
    - An imported copy that was itself published gets both branches (children first)
    - PURE: decided from the impact facts alone, executed in order by the shell

Design Decisions:
    - Explicit step list over implicit FK cascades: deletion order is testable
      without a database (ADR: delete-children-before-parents is the caller's job)
"""

from dataclasses import dataclass

from kondo.core.domain_types import CascadeStep


@dataclass(frozen=True)
class DeletionImpact:
    """Facts about a content item that decide how it is deleted."""
    can_delete: bool
    is_published: bool
    import_count: int = 0
    importer_count: int = 0
    is_imported: bool = False


def plan_deletion(impact: DeletionImpact) -> list[CascadeStep]:
    """Ordered steps to delete a content item with the given impact."""
    steps = [CascadeStep.CHECK_IMPACT]
    if impact.is_published:
        steps += [CascadeStep.DELETE_CHILDREN, CascadeStep.DELETE_POST]
    if impact.is_imported:
        steps.append(CascadeStep.RELEASE_IMPORT)
    steps.append(CascadeStep.DELETE_PARENT)
    return steps

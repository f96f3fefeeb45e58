"""
Reviewable Item Resolution

Clients refer to a bookmarked question either by the bookmark's own id or
by the id of the question it points at. This module turns such a reference
into the owning user's bookmark row, trying the item id first and the
question id second, both scoped to the user.

Resolution never raises for a missing item: it returns ItemNotFound so the
caller chooses the error (the review flow maps it to ItemNotFoundError).

Usage:
    from revision_hub.services.review.item_resolver import ItemFound, resolve_item

    resolution = await resolve_item(db, item_ref, user_id, for_update=True)
    if isinstance(resolution, ItemFound):
        item = resolution.item
"""

import logging
from dataclasses import dataclass
from typing import Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from revision_hub.db.models import BookmarkedQuestion

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemFound:
    """The reference matched a bookmark; matched_by is 'id' or 'question_id'."""

    item: BookmarkedQuestion
    matched_by: str


@dataclass(frozen=True)
class ItemNotFound:
    """Neither an item id nor a question id owned by the user matched."""

    item_ref: str
    user_id: str


ItemResolution = Union[ItemFound, ItemNotFound]


async def resolve_item(
    db: AsyncSession,
    item_ref: str,
    user_id: str,
    for_update: bool = False,
) -> ItemResolution:
    """
    Look up a user's bookmark by item id, then by question id.

    Args:
        db: Database session. When for_update is set the caller must be in
            a transaction it will commit or roll back.
        item_ref: Item id or question id.
        user_id: Owner; bookmarks of other users never match.
        for_update: Take an exclusive row lock (SELECT ... FOR UPDATE) so
            concurrent reviews of the same item serialize.

    Returns:
        ItemFound or ItemNotFound.
    """
    for column, label in (
        (BookmarkedQuestion.id, "id"),
        (BookmarkedQuestion.question_id, "question_id"),
    ):
        query = select(BookmarkedQuestion).where(
            column == item_ref,
            BookmarkedQuestion.user_id == user_id,
        )
        if for_update:
            # Reload attributes once the lock is held
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await db.execute(query)
        item = result.scalar_one_or_none()
        if item is not None:
            logger.debug(f"Resolved {item_ref} by {label} to item {item.id}")
            return ItemFound(item=item, matched_by=label)

    return ItemNotFound(item_ref=item_ref, user_id=user_id)

"""Derived fields on User documents.

The average rating is computed from the user's own records. Resolving the
most played game's display name needs the games collection, which is
reached only through the injected ``GameNameLookup``.
"""

import logging
from typing import Awaitable, Callable, Optional

from gamecatalog.models.user import User
from gamecatalog.services.rating_math import compute_average_rating, find_most_played

logger = logging.getLogger("gamecatalog.services.user_aggregates")

# game id -> display name, or None when the game does not exist
GameNameLookup = Callable[[str], Awaitable[Optional[str]]]


class UserAggregateUpdater:
    """Recomputes ``average_rating`` and the most played game of a user."""

    def __init__(self, game_name_lookup: GameNameLookup) -> None:
        self._game_name_lookup = game_name_lookup

    def refresh_average_rating(self, user: User) -> float:
        user.average_rating = compute_average_rating(
            r.rating for r in user.game_ratings
        )
        return user.average_rating

    async def refresh_most_played_game(self, user: User) -> Optional[str]:
        """Recompute ``most_played_game_id`` and its display name.

        The name is fetched only when the winning game changes. A game that
        cannot be found leaves the name unset.

        Returns:
            The most played game id, or None.
        """
        if not user.game_play_times:
            user.most_played_game_id = None
            user.most_played_game_name = None
            return None

        winner = find_most_played(
            (r.game_id, r.play_time) for r in user.game_play_times
        )
        if winner == user.most_played_game_id:
            return winner

        user.most_played_game_id = winner
        user.most_played_game_name = None
        if winner is not None:
            user.most_played_game_name = await self._game_name_lookup(winner)
            if user.most_played_game_name is None:
                logger.warning(
                    "Most played game %s of user %s not found; name left unset",
                    winner, user.id,
                )
        return winner

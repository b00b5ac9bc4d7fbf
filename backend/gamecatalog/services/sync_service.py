"""Cross-entity synchronization between Game and User documents.

Play time, ratings and comments live on both documents. Every operation here
validates its inputs and gates first, then mutates both documents in memory,
then writes the game and the user as two separate saves. Gate failures never
write anything. A failure on the second save leaves the first one committed
and is reported as a 500; there is no rollback.

Deletes cascade by scanning the counterpart collection and stripping every
mirrored record of the deleted entity, recomputing derived fields as they go.
"""

import logging
import math
from contextlib import nullcontext
from typing import NamedTuple, Optional

from fastapi import HTTPException, status
from pymongo.errors import PyMongoError

from gamecatalog.config import settings
from gamecatalog.dal.games_dal import GameDAL
from gamecatalog.dal.users_dal import UserDAL
from gamecatalog.models.game import Game, GameComment, UserPlayTime, UserRating
from gamecatalog.models.user import GamePlayTime, GameRating, User, UserComment
from gamecatalog.services.entity_locks import EntityLocks, game_key, user_key
from gamecatalog.services.rating_math import compute_weighted_rating
from gamecatalog.services.user_aggregates import UserAggregateUpdater

logger = logging.getLogger("gamecatalog.services.sync")

MIN_RATING = 1
MAX_RATING = 5


class SyncResult(NamedTuple):
    """Both documents as persisted by a synchronized operation."""
    game: Game
    user: User


def refresh_game_rating(game: Game) -> float:
    """Recompute the stored weighted rating of a game from its records."""
    game.rating = compute_weighted_rating(
        {r.user_id: r.rating for r in game.user_ratings},
        {r.user_id: r.play_time for r in game.user_play_times},
    )
    return game.rating


class SyncService:
    """Service layer keeping Game and User mirrors consistent."""

    def __init__(
        self,
        game_dal: GameDAL,
        user_dal: UserDAL,
        locks: Optional[EntityLocks] = None,
        aggregates: Optional[UserAggregateUpdater] = None,
        min_review_hours: Optional[float] = None,
    ) -> None:
        self._game_dal = game_dal
        self._user_dal = user_dal
        self._locks = locks
        self._aggregates = aggregates or UserAggregateUpdater(game_dal.get_name)
        self._min_review_hours = (
            settings.MIN_REVIEW_PLAY_HOURS
            if min_review_hours is None
            else min_review_hours
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _hold(self, *keys: str):
        if self._locks is None:
            return nullcontext()
        return self._locks.hold(*keys)

    async def _get_game_or_404(self, game_id: str) -> Game:
        game = await self._game_dal.get_by_id(game_id)
        if game is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Game not found",
            )
        return game

    async def _get_user_or_404(self, user_id: str) -> User:
        user = await self._user_dal.get_by_id(user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def _require_enabled(self, game: Game, action: str) -> None:
        """Raise 400 if new ratings and comments are switched off for the game."""
        if not game.rating_enabled:
            logger.warning("%s rejected: disabled on game %s", action, game.id)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{action} is disabled for this game",
            )

    def _require_min_play_time(self, game: Game, user_id: str, action: str) -> None:
        """Raise 400 unless the user has played the game long enough to review it."""
        if game.user_play_time(user_id) < self._min_review_hours:
            logger.warning(
                "%s rejected: user %s played game %s for %.2f hours",
                action, user_id, game.id, game.user_play_time(user_id),
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"User must play this game for at least "
                    f"{self._min_review_hours:g} hour(s) before {action.lower()}"
                ),
            )

    async def _persist(self, game: Game, user: User) -> None:
        """Write the game, then the user. Not atomic across the two."""
        if not await self._game_dal.save(game):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Game not found",
            )
        try:
            saved = await self._user_dal.save(user)
        except PyMongoError:
            logger.exception(
                "User %s save failed after game %s was saved; mirrors diverged",
                user.id, game.id,
            )
            raise
        if not saved:
            logger.error(
                "User %s vanished after game %s was saved; mirrors diverged",
                user.id, game.id,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="User was removed while the game was being updated",
            )

    # ------------------------------------------------------------------
    # Record play time
    # ------------------------------------------------------------------

    async def record_play(self, game_id: str, user_id: str, hours: float) -> SyncResult:
        """Add play hours for a user on a game, on both documents.

        Play time is cumulative. The game's weighted rating is recomputed
        because the user's weight changed, and any comment by the user has
        its stored play time refreshed and is re-sorted.

        Raises:
            HTTPException 400: Missing user id, or hours not a positive finite number.
            HTTPException 404: Game or user not found.
        """
        if not user_id or hours is None or not math.isfinite(hours) or hours <= 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User ID and positive play hours are required",
            )

        async with self._hold(game_key(game_id), user_key(user_id)):
            game = await self._get_game_or_404(game_id)
            user = await self._get_user_or_404(user_id)

            # --- game side ---
            game_entry = game.play_time_entry(user_id)
            if game_entry is None:
                game_entry = UserPlayTime(user_id=user_id)
                game.user_play_times.append(game_entry)
            previous = game_entry.play_time
            game_entry.play_time = previous + hours
            game.play_time = game.play_time - previous + game_entry.play_time
            refresh_game_rating(game)

            game_comment = game.comment_by(user_id)
            if game_comment is not None:
                game_comment.play_time = game_entry.play_time
                game.sort_comments()

            # --- user side ---
            user_entry = user.play_time_entry(game_id)
            if user_entry is None:
                user_entry = GamePlayTime(game_id=game_id)
                user.game_play_times.append(user_entry)
            user_entry.play_time += hours
            user.total_play_time += hours
            await self._aggregates.refresh_most_played_game(user)

            user_comment = user.comment_on(game_id)
            if user_comment is not None:
                user_comment.play_time = user_entry.play_time
                user.sort_comments()

            await self._persist(game, user)

        logger.info(
            "Recorded %.2f hours: user=%s game=%s (total %.2f)",
            hours, user_id, game_id, game_entry.play_time,
        )
        return SyncResult(game, user)

    # ------------------------------------------------------------------
    # Rate
    # ------------------------------------------------------------------

    async def rate_game(self, game_id: str, user_id: str, rating: int) -> SyncResult:
        """Set (or replace) a user's rating of a game on both documents.

        Raises:
            HTTPException 400: Missing user id, rating outside 1-5, rating
                disabled, or less than the minimum play time.
            HTTPException 404: Game or user not found.
        """
        if not user_id or rating is None or not MIN_RATING <= rating <= MAX_RATING:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"User ID and rating ({MIN_RATING}-{MAX_RATING}) are required",
            )

        async with self._hold(game_key(game_id), user_key(user_id)):
            game = await self._get_game_or_404(game_id)
            self._require_enabled(game, "Rating")
            user = await self._get_user_or_404(user_id)
            self._require_min_play_time(game, user_id, "Rating")

            game_entry = game.rating_entry(user_id)
            if game_entry is None:
                game.user_ratings.append(UserRating(user_id=user_id, rating=rating))
            else:
                game_entry.rating = rating
            refresh_game_rating(game)

            user_entry = user.rating_entry(game_id)
            if user_entry is None:
                user.game_ratings.append(GameRating(game_id=game_id, rating=rating))
            else:
                user_entry.rating = rating
            self._aggregates.refresh_average_rating(user)

            await self._persist(game, user)

        logger.info(
            "User %s rated game %s: %d (game rating now %.2f)",
            user_id, game_id, rating, game.rating,
        )
        return SyncResult(game, user)

    # ------------------------------------------------------------------
    # Comment
    # ------------------------------------------------------------------

    async def comment_on_game(self, game_id: str, user_id: str, content: str) -> SyncResult:
        """Set (or replace) a user's comment on a game on both documents.

        The user's name, the game's name and the current play time are
        captured into the comment. Both comment lists stay ordered by play
        time, longest first.

        Raises:
            HTTPException 400: Missing user id or content, commenting
                disabled, or less than the minimum play time.
            HTTPException 404: Game or user not found.
        """
        if not user_id or not content or not content.strip():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User ID and comment content are required",
            )

        async with self._hold(game_key(game_id), user_key(user_id)):
            game = await self._get_game_or_404(game_id)
            self._require_enabled(game, "Commenting")
            user = await self._get_user_or_404(user_id)
            self._require_min_play_time(game, user_id, "Commenting")
            play_time = game.user_play_time(user_id)

            game_comment = game.comment_by(user_id)
            if game_comment is None:
                game.comments.append(
                    GameComment(
                        user_id=user_id,
                        user_name=user.name,
                        content=content,
                        play_time=play_time,
                    )
                )
            else:
                game_comment.content = content
                game_comment.user_name = user.name
                game_comment.play_time = play_time
            game.sort_comments()

            user_comment = user.comment_on(game_id)
            if user_comment is None:
                user.comments.append(
                    UserComment(
                        game_id=game_id,
                        game_name=game.name,
                        content=content,
                        play_time=play_time,
                    )
                )
            else:
                user_comment.content = content
                user_comment.game_name = game.name
                user_comment.play_time = play_time
            user.sort_comments()

            await self._persist(game, user)

        logger.info("User %s commented on game %s", user_id, game_id)
        return SyncResult(game, user)

    # ------------------------------------------------------------------
    # Rating / comment gate
    # ------------------------------------------------------------------

    async def set_rating_enabled(self, game_id: str, enable: bool) -> Game:
        """Enable or disable new ratings and comments on a game.

        Existing ratings and comments are left untouched.

        Raises:
            HTTPException 400: ``enable`` is not a boolean.
            HTTPException 404: Game not found.
        """
        if not isinstance(enable, bool):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="enable must be a boolean",
            )

        async with self._hold(game_key(game_id)):
            game = await self._get_game_or_404(game_id)
            game.rating_enabled = enable
            if not await self._game_dal.save(game):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Game not found",
                )

        logger.info("Game %s rating/comments %s", game_id, "enabled" if enable else "disabled")
        return game

    # ------------------------------------------------------------------
    # Cascading deletes
    # ------------------------------------------------------------------

    async def _strip_game_from_users(self, game_id: str) -> int:
        """Remove every record of a game from the users that hold one."""
        updated = 0
        for candidate in await self._user_dal.find_referencing_game(game_id):
            async with self._hold(game_key(game_id), user_key(candidate.id)):
                # Re-read under the lock; the scan result may be stale.
                user = await self._user_dal.get_by_id(candidate.id)
                if user is None or not user.references_game(game_id):
                    continue

                entry = user.play_time_entry(game_id)
                if entry is not None:
                    user.total_play_time -= entry.play_time
                user.game_play_times = [
                    r for r in user.game_play_times if r.game_id != game_id
                ]
                user.game_ratings = [
                    r for r in user.game_ratings if r.game_id != game_id
                ]
                user.comments = [c for c in user.comments if c.game_id != game_id]

                self._aggregates.refresh_average_rating(user)
                await self._aggregates.refresh_most_played_game(user)
                await self._user_dal.save(user)
                updated += 1
        return updated

    async def _strip_user_from_games(self, user_id: str) -> int:
        """Remove every record of a user from the games that hold one."""
        updated = 0
        for candidate in await self._game_dal.find_referencing_user(user_id):
            async with self._hold(game_key(candidate.id), user_key(user_id)):
                game = await self._game_dal.get_by_id(candidate.id)
                if game is None or not game.references_user(user_id):
                    continue

                contribution = game.user_play_time(user_id)
                game.user_play_times = [
                    r for r in game.user_play_times if r.user_id != user_id
                ]
                game.user_ratings = [
                    r for r in game.user_ratings if r.user_id != user_id
                ]
                game.comments = [c for c in game.comments if c.user_id != user_id]
                game.play_time -= contribution
                refresh_game_rating(game)

                await self._game_dal.save(game)
                updated += 1
        return updated

    async def delete_game(self, game_id: str) -> int:
        """Delete a game and strip its records from every user.

        Each affected user loses the game's hours from its total and has
        its average rating and most played game recomputed before being
        saved. The game document is deleted last.

        Not atomic: the game lock is only held per user and for the final
        delete, so a play recorded between the sweep and the delete writes
        a fresh mirror. A second sweep after the delete removes those; no
        new ones can appear once the game is gone.

        Returns:
            The number of user documents that were rewritten.

        Raises:
            HTTPException 404: Game not found.
        """
        await self._get_game_or_404(game_id)

        updated = await self._strip_game_from_users(game_id)

        async with self._hold(game_key(game_id)):
            if not await self._game_dal.delete(game_id):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Game not found",
                )

        updated += await self._strip_game_from_users(game_id)

        logger.info("Deleted game %s; cleaned %d user(s)", game_id, updated)
        return updated

    async def delete_user(self, user_id: str) -> int:
        """Delete a user and strip its records from every game.

        Each affected game loses exactly the user's play-time contribution
        and has its weighted rating recomputed. The user document is
        deleted last, followed by a second sweep for records written in
        between, as in ``delete_game``.

        Returns:
            The number of game documents that were rewritten.

        Raises:
            HTTPException 404: User not found.
        """
        await self._get_user_or_404(user_id)

        updated = await self._strip_user_from_games(user_id)

        async with self._hold(user_key(user_id)):
            if not await self._user_dal.delete(user_id):
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="User not found",
                )

        updated += await self._strip_user_from_games(user_id)

        logger.info("Deleted user %s; cleaned %d game(s)", user_id, updated)
        return updated

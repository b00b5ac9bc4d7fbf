"""Pure functions for catalog aggregates.

No database access, no async. All inputs are plain dicts/lists.
"""

from typing import Iterable, Mapping, Optional


def compute_weighted_rating(
    ratings: Mapping[str, float],
    play_times: Mapping[str, float],
) -> float:
    """Compute a game's rating as the play-time-weighted mean of user ratings.

    A rater with no recorded play time (or zero) carries no weight and is
    left out of both numerator and denominator.

    Args:
        ratings: user id -> rating (1-5).
        play_times: user id -> cumulative hours played.

    Returns:
        The weighted mean, or 0 when no rater qualifies.
    """
    weighted_sum = 0.0
    total_weight = 0.0

    for user_id, rating in ratings.items():
        hours = play_times.get(user_id)
        if not hours or hours <= 0:
            continue
        weighted_sum += rating * hours
        total_weight += hours

    if total_weight <= 0:
        return 0
    return weighted_sum / total_weight


def compute_average_rating(ratings: Iterable[float]) -> float:
    """Unweighted mean of a user's ratings, or 0 when there are none."""
    values = list(ratings)
    if not values:
        return 0
    return sum(values) / len(values)


def find_most_played(play_times: Iterable[tuple[str, float]]) -> Optional[str]:
    """Return the id with the greatest play time, scanning in order.

    Uses a strictly-greater comparison starting from zero, so the first of
    several tied entries wins and entries with no hours never do.

    Args:
        play_times: (game id, hours) pairs in stored order.

    Returns:
        The winning game id, or None if no entry has positive hours.
    """
    best_id: Optional[str] = None
    best_hours = 0.0

    for game_id, hours in play_times:
        if hours > best_hours:
            best_hours = hours
            best_id = game_id

    return best_id

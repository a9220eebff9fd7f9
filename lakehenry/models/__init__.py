from .models import (
    PHOTO_CATEGORIES,
    Donor,
    Event,
    EventKind,
    EventStatus,
    Photo,
    PhotoStatus,
    RaffleMonth,
    RaffleWinner,
)

__all__ = [
    'PHOTO_CATEGORIES',
    'Donor',
    'Event',
    'EventKind',
    'EventStatus',
    'Photo',
    'PhotoStatus',
    'RaffleMonth',
    'RaffleWinner',
]

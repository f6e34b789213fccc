from .auth import router as auth_router
from .finance import router as finance_router
from .healthcheck import router as healthcheck_router
from .reservations import router as reservations_router
from .time_slots import router as time_slots_router
from .users import router as users_router
from .venue_types import router as venue_types_router
from .venues import router as venues_router

__all__ = [
    'auth_router',
    'users_router',
    'venue_types_router',
    'venues_router',
    'time_slots_router',
    'reservations_router',
    'finance_router',
    'healthcheck_router',
]

routers = [
    auth_router,
    users_router,
    venue_types_router,
    venues_router,
    time_slots_router,
    reservations_router,
    finance_router,
    healthcheck_router,
]

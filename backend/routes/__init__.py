"""FastAPI API endpoints under /api.

Endpoint groups: settings (health, settings, check-connection), users
(records, access checks, stats), cards (generation, saved cards, thank-you,
share links), billing (checkout, upgrade), trivia (questions, sheet import),
flows (onboarding stage machine), arcade (hosted game sessions, client-reported
sessions). Per-user live state lives under /api/flows/{user_id} and
/api/arcade/{user_id}.
"""

from fastapi import APIRouter

from .arcade import router as arcade_router
from .billing import router as billing_router
from .cards import router as cards_router
from .flows import router as flows_router
from .settings import router as settings_router
from .trivia import router as trivia_router
from .users import router as users_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(users_router)
router.include_router(cards_router)
router.include_router(billing_router)
router.include_router(trivia_router)
router.include_router(flows_router)
router.include_router(arcade_router)

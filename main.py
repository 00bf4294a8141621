import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers.admin import router as admin_router
from routers.attempts import router as attempts_router
from routers.health import router as health_router
from routers.marking import router as marking_router
from routers.review import router as review_router
from routers.sessions import router as sessions_router
from routers.tiers import router as tiers_router

logger = logging.getLogger("arith-practice")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Arithmetic Practice API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-api-key", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(tiers_router)  # /tiers
app.include_router(sessions_router)  # /sessions
app.include_router(marking_router)  # /mark, /mark-batch
app.include_router(review_router)  # /review, /review/stats
app.include_router(attempts_router)  # /attempts/...
app.include_router(admin_router)  # /admin/...
app.include_router(health_router)  # /health/...

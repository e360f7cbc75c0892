from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dual_deposit.api.deps import build_ratio_cache
from dual_deposit.api.routers.deposit import router as deposit_router
from dual_deposit.api.routers.pool_ratio import router as pool_ratio_router
from dual_deposit.api.routers.wallet import router as wallet_router
from dual_deposit.shared.config import get_settings


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with build_ratio_cache(settings) as ratio_cache:
        app.state.ratio_cache = ratio_cache
        yield
    app.state.ratio_cache = None


app = FastAPI(title="Dual Deposit API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pool_ratio_router)
app.include_router(wallet_router)
app.include_router(deposit_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("dual_deposit.main:app", host="0.0.0.0", port=8000)

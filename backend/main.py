# backend/main.py

import asyncio
import sys
from fastapi import FastAPI
from backend.api import user
from backend.configure import configure


async def register_routes(app: FastAPI):
    app.include_router(user.router, prefix="/api/user", tags=["user"])


def run():
    context = asyncio.run(configure(register_routes))
    sys.exit(context.exit_code)


if __name__ == "__main__":
    run()

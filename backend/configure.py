# backend/configure.py

import asyncio
import logging
import signal
from contextlib import asynccontextmanager
from typing import Awaitable, Callable
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backend.config import Settings, load_settings
from backend.core.errors import register_error_handler
from backend.core.keys import KeyPair, key_pair
from backend.core.static import register_static
from backend.database import Database


logger = logging.getLogger(__name__)

EXIT_SIGNALS = (signal.SIGINT, signal.SIGTERM)
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

RegisterRoutes = Callable[[FastAPI], Awaitable[None]]


def configure_logging(enabled: bool):
    level = logging.INFO if enabled else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


# -------------------------------
# Application Context
# -------------------------------

class Application:
    """
    Everything a running backend owns: settings, database, signing keys,
    the FastAPI app and, once listening, the uvicorn server.
    Built once per process by `configure`.
    """

    def __init__(self, settings: Settings, database: Database | None = None):
        self.settings = settings
        self.database = database or Database(settings.database_url)
        self.keys: KeyPair | None = None
        self.server: uvicorn.Server | None = None
        self.exit_code: int | None = None
        self.handle_signals = False
        self._installed_signals: set[int] = set()
        self._serving: asyncio.Future | None = None
        self._shutdown_task: asyncio.Task | None = None
        self.app = self.create_app()

    def create_app(self) -> FastAPI:
        configure_logging(self.settings.logger)

        app = FastAPI(
            lifespan=self.lifespan,
            docs_url="/api/docs",
            redoc_url=None,
            openapi_url="/api/openapi.json",
        )
        app.state.settings = self.settings
        app.state.database = self.database

        if self.settings.cors_origins:
            app.add_middleware(
                CORSMiddleware,
                allow_origins=self.settings.cors_origins,
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            )
        return app

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        self.database.init()
        if self.server is not None and self.handle_signals:
            self.install_signal_handlers()
        logger.info("Backend started")
        yield
        await self.database.close()

    # -------------------------------
    # Shutdown
    # -------------------------------

    def install_signal_handlers(self):
        # Runs inside the serving loop so these replace uvicorn's own handlers.
        loop = asyncio.get_running_loop()
        for sig in EXIT_SIGNALS:
            if sig in self._installed_signals:
                continue
            loop.add_signal_handler(sig, self.on_exit_signal, sig)
            self._installed_signals.add(sig)

    def on_exit_signal(self, sig: signal.Signals):
        if self._shutdown_task is not None:
            return
        self._shutdown_task = asyncio.ensure_future(self.shutdown(sig))

    async def shutdown(self, sig: signal.Signals | None = None):
        """
        Closes the server and the database concurrently, then marks the
        process for a clean exit.
        """
        if sig is not None:
            logger.info("Received %s, shutting down", signal.Signals(sig).name)
        await asyncio.gather(self.close_server(), self.database.close())
        self.exit_code = 0

    async def close_server(self):
        if self.server is None:
            return
        self.server.should_exit = True
        if self._serving is not None:
            await self._serving

    def server_config(self) -> uvicorn.Config:
        return uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_config=None,
            log_level="info" if self.settings.logger else "warning",
            access_log=self.settings.logger,
        )

    async def listen(self):
        self.server = uvicorn.Server(self.server_config())
        logger.info("Listening on %s:%s", self.settings.host, self.settings.port)

        self._serving = asyncio.ensure_future(self.server.serve())
        await self._serving
        if self._shutdown_task is not None:
            await self._shutdown_task
        if self.exit_code is None:
            self.exit_code = 0


# -------------------------------
# Bootstrap Steps
# -------------------------------

def register_exit_handlers(context: Application):
    context.handle_signals = True


def register_authentication(context: Application):
    context.keys = key_pair(context.settings)
    context.app.state.keys = context.keys


async def build(
    register_routes: RegisterRoutes,
    settings: Settings | None = None,
    database: Database | None = None,
) -> Application:
    """
    Assembles the application in order: error handler, exit handlers,
    authentication, caller routes, static fallback. Does not listen.
    """
    context = Application(settings or load_settings(), database)

    register_error_handler(context.app)
    register_exit_handlers(context)
    register_authentication(context)

    await register_routes(context.app)

    register_static(context.app, context.settings.frontend_dir)
    return context


async def configure(register_routes: RegisterRoutes, settings: Settings | None = None) -> Application:
    context = await build(register_routes, settings)
    await context.listen()
    return context

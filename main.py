import json
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from fastapi.staticfiles import StaticFiles

from config import MissingCredentials, Settings, load_settings
from handlers import dispatch_events, submit_leave
from messaging import SIGNATURE_HEADER, LineMessagingClient, Messenger, verify_signature

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
WEB_DIR = BASE_DIR / "web"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# -----------------------
# Dependencies
# -----------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_messenger(request: Request) -> Messenger:
    return request.app.state.messenger


async def read_json(req: Request):
    try:
        return await req.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def liff_env_script(settings: Settings) -> str:
    env = {"LIFF_ID": settings.liff_id, "BASE_URL": settings.base_url}
    return f"window.__LIFF_ENV__ = {json.dumps(env, ensure_ascii=False)};"


# -----------------------
# App
# -----------------------
def create_app(settings: Settings | None = None, messenger: Messenger | None = None) -> FastAPI:
    settings = settings or load_settings()
    messenger = messenger or LineMessagingClient(settings.channel_access_token)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        aclose = getattr(app.state.messenger, "aclose", None)
        if aclose is not None:
            await aclose()

    app = FastAPI(title="LINE leave bot", lifespan=lifespan)
    app.state.settings = settings
    app.state.messenger = messenger

    @app.get("/", response_class=PlainTextResponse)
    def health():
        return "OK"

    # LINE console "Verify" button sends a GET
    @app.get("/webhook", response_class=PlainTextResponse)
    def webhook_verify():
        return "OK"

    @app.post("/webhook")
    async def webhook(
        req: Request,
        settings: Settings = Depends(get_settings),
        messenger: Messenger = Depends(get_messenger),
    ):
        body = await req.body()
        if not verify_signature(body, req.headers.get(SIGNATURE_HEADER), settings.channel_secret):
            return JSONResponse({"ok": False, "error": "invalid signature"}, status_code=401)

        try:
            payload = json.loads(body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JSONResponse({"ok": False, "error": "invalid json"}, status_code=400)

        events = payload.get("events") if isinstance(payload, dict) else None
        if not isinstance(events, list):
            events = []
        logger.info("Webhook events: %s", json.dumps(events, ensure_ascii=False))

        await dispatch_events(events, messenger, settings)
        return Response(status_code=200)

    # must be registered before the /liff static mount
    @app.get("/liff/env.js")
    def liff_env(settings: Settings = Depends(get_settings)):
        return Response(liff_env_script(settings), media_type="application/javascript")

    @app.post("/api/leave")
    async def api_leave(
        req: Request,
        settings: Settings = Depends(get_settings),
        messenger: Messenger = Depends(get_messenger),
    ):
        payload = await read_json(req)
        status, body = await submit_leave(payload or {}, messenger, settings)
        return JSONResponse(body, status_code=status)

    app.mount("/liff", StaticFiles(directory=WEB_DIR, html=True), name="liff")

    return app


def build_app() -> FastAPI:
    try:
        settings = load_settings()
    except MissingCredentials as e:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("%s in .env / deployment environment", e)
        sys.exit(1)

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    return create_app(settings)


if __name__ == "__main__":
    import uvicorn

    app = build_app()
    settings = app.state.settings
    logger.info("Listening on %s. Public base: %s", settings.port, settings.base_url)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "server is running"


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}

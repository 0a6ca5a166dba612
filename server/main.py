# server/main.py
"""
QR 메일 + 증명 제출 API 서버. uvicorn server.main:app --reload
(또는 python -m server.main 으로 PORT 에서 실행)
"""
from contextlib import asynccontextmanager
import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

import config
from services.artifacts.store import ArtifactStore
from services.email.dispatcher import MailDispatcher
from services.email.pipeline import QrMailPipeline
from services.email.schemas import EmailRequest
from services.errors import ServiceError
from services.ledger.gateway import LedgerGateway
from services.ledger.schemas import ProofSubmission

logger = logging.getLogger("qrmail")
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s | %(levelname)s | %(message)s")


# ---------- 컴포넌트 초기화 ----------
def build_pipeline() -> QrMailPipeline:
    store = ArtifactStore(config.QR_DIR)
    store.ensure_directory()
    smtp = config.smtp_settings()
    return QrMailPipeline(store, MailDispatcher(smtp), sender=smtp.sender)


def build_gateway() -> LedgerGateway | None:
    settings = config.ledger_settings()
    if settings is None:
        logger.warning("RPC_URL/PRIVATE_KEY/CONTRACT_ADDRESS not set, contract interaction disabled")
        return None
    return LedgerGateway(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.pipeline = build_pipeline()
    logger.info("Email service initialized (qr dir=%s)", config.QR_DIR)
    app.state.gateway = build_gateway()
    if app.state.gateway is not None:
        logger.info("Contract interaction service initialized (signer=%s)", app.state.gateway.address)
    yield


app = FastAPI(title="QR Mail & Proof API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_pipeline(request: Request) -> QrMailPipeline:
    return request.app.state.pipeline


def get_gateway(request: Request) -> LedgerGateway:
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise ServiceError("Ledger gateway is not configured")
    return gateway


# ---------- 예외 → 응답 변환 ----------
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"{field}: {msg}" if field else msg},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


# ---------- 라우트 ----------
@app.get("/health")
async def health(request: Request):
    return {"ok": True, "ledgerConfigured": getattr(request.app.state, "gateway", None) is not None}


@app.post("/api/send-email")
async def send_email(req: EmailRequest, pipeline: QrMailPipeline = Depends(get_pipeline)):
    logger.info("send-email to=%s qrUrl=%s", req.to, req.qr_url)
    result = await run_in_threadpool(pipeline.send_qr_email, req)
    return {"success": True, "messageId": result.message_id}


@app.post("/contract/interact")
async def contract_interact(req: ProofSubmission, gateway: LedgerGateway = Depends(get_gateway)):
    logger.info("contract/interact proof_len=%d handle=%s", len(req.input_proof), req.handle)
    await run_in_threadpool(gateway.submit_proof, req.input_proof)
    return {"success": True}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.main:app", host="0.0.0.0", port=config.PORT)

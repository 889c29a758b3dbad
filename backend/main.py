import logging

from fastapi import FastAPI

from api import installments_router
from constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

app = FastAPI(title="Subscription Installments API")

app.include_router(installments_router)


@app.middleware("http")
async def log_requests(request, call_next):
    response = await call_next(request)
    logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


@app.get("/api/health")
async def health():
    return {"status": "ok"}

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from groupsettle.api.v1.routes.balances import router as balances_router
from groupsettle.api.v1.routes.settlement import router as settlement_router
from groupsettle.api.v1.routes.system import router as system_router
from groupsettle.core.config import settings
from groupsettle.core.errors import AppError, error_response
from groupsettle.core.logging import setup_logging

setup_logging(settings.LOG_LEVEL)

app = FastAPI(title=settings.APP_NAME)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.http_status, content=error_response(exc))


@app.get("/")
async def root():
    return {"message": f"{settings.APP_NAME} settlement engine is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(balances_router, prefix="/api/v1/balances")
app.include_router(settlement_router, prefix="/api/v1/settlements")

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from safe_ledger.api.routes import health
from safe_ledger.core.config import settings
from safe_ledger.core.logging import clear_context, configure_logging, get_logger
from safe_ledger.core.monitoring import configure_error_monitoring
from safe_ledger.core.observability import configure_observability
from safe_ledger.db.immutability import register_immutability_listeners
from safe_ledger.domains.audit.router import router as audit_router
from safe_ledger.domains.employees.router import router as employee_router
from safe_ledger.domains.expenses.router import deposits_router, vendors_router
from safe_ledger.domains.expenses.router import router as expense_router
from safe_ledger.domains.payroll.router import router as payroll_router
from safe_ledger.domains.reconciliation.router import router as reconciliation_router
from safe_ledger.domains.safe.router import router as safe_router
from safe_ledger.domains.sales.router import router as sales_router
from safe_ledger.domains.shifts.router import router as shift_router
from safe_ledger.domains.time_entries.router import router as time_router
from safe_ledger.errors import LedgerError, TransientStoreError

configure_logging(settings.log_level)
configure_observability()
configure_error_monitoring()
register_immutability_listeners()
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.cors_origins] or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(safe_router)
app.include_router(shift_router)
app.include_router(sales_router)
app.include_router(expense_router)
app.include_router(deposits_router)
app.include_router(vendors_router)
app.include_router(reconciliation_router)
app.include_router(payroll_router)
app.include_router(time_router)
app.include_router(employee_router)
app.include_router(audit_router)


@app.middleware("http")
async def reset_log_context(request: Request, call_next):
    clear_context()
    return await call_next(request)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    log = logger.error if isinstance(exc, TransientStoreError) else logger.info
    log("request_rejected", path=request.url.path, method=request.method, error=exc.code, status=exc.status_code)
    headers = {"Retry-After": "1"} if isinstance(exc, TransientStoreError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.on_event("startup")
def startup_event() -> None:
    logger.info("startup_complete", env=settings.env)


@app.get("/")
def root() -> dict[str, str]:
    return {"message": "Safe Ledger API running", "environment": settings.env}

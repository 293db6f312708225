from fastapi import FastAPI
from crewledger.fastapi.api.v1.endpoints import employee, piece_rate, daily_log, payslip, backup, general


def setup_routers(app: FastAPI):
    # Health and overview routes
    app.include_router(general.base_router, prefix="", tags=["main"])
    app.include_router(general.router, prefix="/api/v1/general", tags=["general-data"])

    # Crew and rate catalog routes
    app.include_router(employee.router, prefix="/api/v1/employees", tags=["employee-management"])
    app.include_router(piece_rate.router, prefix="/api/v1/piece-rates", tags=["piece-rates"])

    # Daily group log routes
    app.include_router(daily_log.router, prefix="/api/v1/daily-logs", tags=["daily-logs"])

    # Payslip generation and history routes
    app.include_router(payslip.router, prefix="/api/v1/payslips", tags=["payslips"])

    # Backup and restore routes
    app.include_router(backup.router, prefix="/api/v1/backup", tags=["backup"])

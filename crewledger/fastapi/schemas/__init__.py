from crewledger.fastapi.schemas.employee import (
    EmployeeBase,
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeStatusUpdate,
    EmployeeRead,
    EmployeeListResponse
)
from crewledger.fastapi.schemas.piece_rate import (
    PieceRateBase,
    PieceRateCreate,
    PieceRateUpdate,
    PieceRateRead,
    PieceRateListResponse
)
from crewledger.fastapi.schemas.daily_log import (
    DailyTaskInput,
    CustomTaskInput,
    DailyLogUpsert,
    DailyTaskRead,
    DailyLogRead,
    DailyLogListResponse
)
from crewledger.fastapi.schemas.payslip import (
    PayslipGenerateRequest,
    PayslipLogEntrySchema,
    PayslipBase,
    PayslipSave,
    PayslipRead,
    PayslipListResponse,
    BulkGenerateRequest,
    BulkFailureRead,
    BulkGenerateResponse,
    CarryOverCandidate
)
from crewledger.fastapi.schemas.backup import (
    BackupEmployee,
    BackupPieceRate,
    BackupDailyTask,
    BackupDailyLog,
    BackupPayslipLogEntry,
    BackupPayslip,
    BackupDocument,
    RestoreSummary
)

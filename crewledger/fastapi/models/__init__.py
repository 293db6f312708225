from crewledger.fastapi.models.employee import Employee
from crewledger.fastapi.models.piece_rate import PieceRate
from crewledger.fastapi.models.daily_log import DailyGroupLog, DailyTask, DailyLogAttendance
from crewledger.fastapi.models.payslip import Payslip, PayslipLogEntry

# elm327diag/obd2/__init__.py
from .models import QueryResult
from .query import QueryEngine, exchange
from .report import ReportGenerator, format_line

__all__ = ["QueryResult", "QueryEngine", "exchange", "ReportGenerator", "format_line"]

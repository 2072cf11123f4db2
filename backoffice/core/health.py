"""
Health probes and process metrics

Check results use the pass/warn/fail vocabulary of the "Health Check
Response Format for HTTP APIs" draft; a group of checks is as healthy as
its worst member.
"""

import logging
import time
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Sequence
import psutil
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

REQUIRED_TABLES = ("accounts", "payments")
MIGRATIONS_TABLE = "alembic_version"

# (fail below, warn below)
DISK_FREE_GB = (1, 5)
MEMORY_AVAILABLE_MB = (100, 500)

def _now() -> str:
    return datetime.utcnow().isoformat() + "Z"

class HealthStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"

def _result(status: HealthStatus, component_type: str, output: Optional[str] = None, **observed) -> Dict[str, Any]:
    result = {"status": status, "componentType": component_type, "time": _now()}
    if output:
        result["output"] = output
    result.update(observed)
    return result

def _threshold(value: float, limits: Sequence[float]) -> HealthStatus:
    fail_below, warn_below = limits
    if value < fail_below:
        return HealthStatus.FAIL
    if value < warn_below:
        return HealthStatus.WARN
    return HealthStatus.PASS

class ServiceHealth:
    """Probes for a service whose only dependency is its database"""

    def __init__(self, service_name: str, engine: Engine, version: str = "1.0.0"):
        self.service_name = service_name
        self.engine = engine
        self.version = version
        self.start_time = time.time()
        self.checks_performed = 0

    def readiness_checks(self) -> Dict[str, Callable[[], Dict[str, Any]]]:
        return {
            "database:connectivity": self._check_database,
            "storage:disk_space": self._check_disk_space,
            "system:memory": self._check_memory,
        }

    def perform_readiness_checks(self) -> Dict[str, Dict[str, Any]]:
        self.checks_performed += 1
        return {name: check() for name, check in self.readiness_checks().items()}

    @staticmethod
    def calculate_overall_status(checks: Dict[str, Dict[str, Any]]) -> HealthStatus:
        statuses = {check.get("status", HealthStatus.PASS) for check in checks.values()}
        for status in (HealthStatus.FAIL, HealthStatus.WARN):
            if status in statuses:
                return status
        return HealthStatus.PASS

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health")
        async def health() -> Dict[str, Any]:
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "timestamp": _now(),
            }

        @router.get("/health/live")
        async def live() -> Dict[str, Any]:
            return {"status": "alive"}

        @router.get("/health/ready")
        def ready() -> JSONResponse:
            """503 only when a check fails; warnings keep the service in rotation"""
            checks = self.perform_readiness_checks()
            overall = self.calculate_overall_status(checks)
            return JSONResponse(
                status_code=503 if overall == HealthStatus.FAIL else 200,
                content={
                    "status": overall,
                    "serviceId": self.service_name,
                    "version": self.version,
                    "checks": checks,
                    "timestamp": _now(),
                },
            )

        @router.get("/health/startup")
        def startup() -> JSONResponse:
            checks = {"database:schema": self._check_schema()}
            if self.calculate_overall_status(checks) == HealthStatus.FAIL:
                return JSONResponse(status_code=503, content={"status": "starting", "checks": checks})
            return JSONResponse(content={"status": "started", "checks": checks})

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            with process.oneshot():
                memory = process.memory_info()
                system = {
                    "memory_rss_bytes": memory.rss,
                    "memory_vms_bytes": memory.vms,
                    "cpu_percent": process.cpu_percent(),
                    "num_threads": process.num_threads(),
                }
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": round(time.time() - self.start_time, 3),
                "checks_performed": self.checks_performed,
                "db_pool": self.engine.pool.status(),
                "system": system,
                "timestamp": _now(),
            }

        return router

    def _check_database(self) -> Dict[str, Any]:
        started = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return _result(HealthStatus.FAIL, "datastore", str(e))
        elapsed_ms = (time.perf_counter() - started) * 1000
        return _result(HealthStatus.PASS, "datastore", observedValue=f"{elapsed_ms:.2f}", observedUnit="ms")

    def _check_schema(self) -> Dict[str, Any]:
        """Both tables must exist; a database created without alembic only warns"""
        try:
            tables = set(inspect(self.engine).get_table_names())
        except Exception as e:
            logger.error(f"Schema inspection failed: {e}")
            return _result(HealthStatus.FAIL, "datastore", str(e))

        missing = [t for t in REQUIRED_TABLES if t not in tables]
        if missing:
            return _result(HealthStatus.FAIL, "datastore", f"Missing tables: {', '.join(missing)}")
        if MIGRATIONS_TABLE not in tables:
            return _result(HealthStatus.WARN, "datastore", "Schema not managed by alembic")
        return _result(HealthStatus.PASS, "datastore")

    def _check_disk_space(self) -> Dict[str, Any]:
        try:
            free_gb = psutil.disk_usage("/").free / 1024 ** 3
        except OSError as e:
            return _result(HealthStatus.WARN, "system", str(e))
        return _result(_threshold(free_gb, DISK_FREE_GB), "system", observedValue=f"{free_gb:.2f}", observedUnit="GB")

    def _check_memory(self) -> Dict[str, Any]:
        available_mb = psutil.virtual_memory().available / 1024 ** 2
        return _result(
            _threshold(available_mb, MEMORY_AVAILABLE_MB), "system",
            observedValue=f"{available_mb:.2f}", observedUnit="MB",
        )

"""
Scheduler de jobs recurrentes (APScheduler).
"""
from sync_service.infrastructure.scheduler.job_scheduler import JobRuntime, JobScheduler, JobState
from sync_service.infrastructure.scheduler.triggers import build_cron_trigger


__all__ = ["JobRuntime", "JobScheduler", "JobState", "build_cron_trigger"]

"""Job definition."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from cronlock.core.common.exceptions import ConfigError
from cronlock.core.jobs.config import JobConfig
from cronlock.core.jobs.work_items import WORK_KEYS, WorkItem, build_work_item
from cronlock.core.triggers.cron import validate_schedule


@dataclass(frozen=True)
class JobDefinition:
    """A named job: schedule, normalized work item and configuration."""

    name: str
    schedule: str
    work: WorkItem
    config: JobConfig

    @classmethod
    def from_config(cls, name: str, config: Mapping[str, Any]) -> "JobDefinition":
        """
        Build a job definition from a flat configuration mapping.

        Args:
            name: Job name
            config: Mapping holding ``schedule``, one work item key and any
                ``JobConfig`` fields. Unknown keys are ignored.

        Raises:
            ConfigError: Missing schedule, bad work item or invalid config value
            ScheduleError: Malformed schedule expression
        """
        if not name or not isinstance(name, str):
            raise ConfigError(f"Job name must be a non-empty string, got {name!r}")

        schedule = config.get("schedule")
        if schedule is None or schedule == "":
            raise ConfigError(f"'schedule' is required for '{name}' job")

        work = build_work_item(name, config)

        options = {k: v for k, v in config.items() if k != "schedule" and k not in WORK_KEYS}
        try:
            job_config = JobConfig(**options)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration for '{name}' job: {e}") from e

        return cls(
            name=name,
            schedule=validate_schedule(schedule),
            work=work,
            config=job_config,
        )

    def to_config(self) -> dict[str, Any]:
        """
        Flatten back to a JSON-shaped configuration mapping.

        ``JobDefinition.from_config(name, job.to_config())`` rebuilds an equal
        definition for every encodable work item.
        """
        return {
            "schedule": self.schedule,
            **self.work.to_config(),
            **self.config.model_dump(mode="json"),
        }

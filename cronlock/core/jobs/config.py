"""Job configuration model."""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAILERS = ("sendmail", "smtp")
SMTP_SECURITY = ("ssl", "tls")


def _split_names(value: Any) -> tuple[str, ...]:
    """Accept "a,b", ["a", "b"] or None and return ("a", "b")."""
    if value is None or value == "":
        return ()
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return tuple(str(item).strip() for item in items if str(item).strip())


class JobConfig(BaseModel):
    """
    Per-job configuration bag.

    Unknown keys are ignored. Field defaults are the ones a runner falls back
    to; the scheduler's default table (see ``Scheduler.get_default_config``)
    fills in host-dependent values such as ``run_on_host`` and ``environment``.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    # Notification
    recipients: tuple[str, ...] = ()
    mailer: str = "sendmail"
    smtp_host: str | None = None
    smtp_port: int = 25
    smtp_username: str | None = None
    smtp_password: str | None = None
    smtp_sender: str | None = None
    smtp_sender_name: str = "cronlock"
    smtp_security: str | None = None

    # Run-time bound, seconds
    max_runtime: int | None = None

    # Execution
    run_as: str | None = None
    environment: str | None = None
    run_on_host: str | None = None
    output: str | None = None
    date_format: str = DEFAULT_DATE_FORMAT
    enabled: bool = True
    halt_dir: str | None = None
    debug: bool = False

    # Coordination
    depends_on: tuple[str, ...] = ()
    lock_dir: str | None = None
    dependency_timeout: float | None = None

    @field_validator("recipients", "depends_on", mode="before")
    @classmethod
    def split_names(cls, value: Any) -> tuple[str, ...]:
        return _split_names(value)

    @field_validator("max_runtime")
    @classmethod
    def validate_max_runtime(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("max_runtime must be >= 0")
        return value

    @field_validator("dependency_timeout")
    @classmethod
    def validate_dependency_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("dependency_timeout must be > 0")
        return value

    @field_validator("mailer")
    @classmethod
    def validate_mailer(cls, value: str) -> str:
        if value not in MAILERS:
            raise ValueError(f"mailer must be one of {', '.join(MAILERS)}")
        return value

    @field_validator("smtp_security")
    @classmethod
    def validate_smtp_security(cls, value: str | None) -> str | None:
        if value is not None and value not in SMTP_SECURITY:
            raise ValueError(f"smtp_security must be one of {', '.join(SMTP_SECURITY)}")
        return value

"""Runner entry point for subprocess-launched jobs.

Usage: python -m cronlock.run_job JOB ENCODED_CONFIG
"""

import argparse
import sys

from cronlock.core.common.exceptions import SchedulerConfigurationError
from cronlock.core.execution.runner import run_job_process
from cronlock.core.jobs.codec import decode_config
from cronlock.core.jobs.definition import JobDefinition
from cronlock.utils.logging import enable_debug_logging, get_default_logger


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m cronlock.run_job",
        description="Run one cronlock job. Launched by Scheduler.run().",
    )
    parser.add_argument("job", help="Job name")
    parser.add_argument("config", help="Encoded job configuration")
    args = parser.parse_args(argv)

    logger = get_default_logger(args.job)
    try:
        job = JobDefinition.from_config(args.job, decode_config(args.config))
    except SchedulerConfigurationError as e:
        logger.error("Invalid job configuration", error=str(e))
        return 2

    if job.config.debug:
        enable_debug_logging()

    run_job_process(job, logger=logger)
    return 0


if __name__ == "__main__":
    sys.exit(main())

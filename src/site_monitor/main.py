import argparse
import asyncio
import logging
import signal
import sys

from dotenv import load_dotenv

from site_monitor.evaluator.decision_engine import SiteDecisionEngine
from site_monitor.evaluator.site_state_tracker import SiteStateTracker
from site_monitor.exception import ConfigError
from site_monitor.schema.monitor_config_schema import MonitorConfig
from site_monitor.task.cron_scheduler import CronScheduler, build_cron_trigger
from site_monitor.task.site_check_job import SiteCheckJob
from site_monitor.util.config_manager import ConfigManager
from site_monitor.util.logger_config import setup_logging
from site_monitor.util.notifier.email_notifier import EmailNotifier
from site_monitor.util.probe.site_probe_client import SiteProbeClient

logger = logging.getLogger("SiteMonitorMain")

SITE_CHECK_JOB_ID = "site_check"


async def main(config: MonitorConfig, scheduler: CronScheduler | None = None, once: bool = False):
    probe_client = SiteProbeClient(token=config.API.TOKEN, timeout_sec=config.API.TIMEOUT_SEC)
    check_job = SiteCheckJob(
        endpoint=config.endpoint,
        probe_client=probe_client,
        tracker=SiteStateTracker(),
        engine=SiteDecisionEngine.from_config(config),
        notifier=EmailNotifier(config.SMTP),
        cycle_deadline_sec=config.CYCLE_DEADLINE_SEC,
    )

    logger.info(f"starting pangolin-site-monitor | endpoint={config.endpoint} | schedule={config.CRON_SCHEDULE} (UTC)")

    try:
        # Run once on startup
        await check_job.run_safely()
        if once or scheduler is None:
            return

        scheduler.add_job(SITE_CHECK_JOB_ID, check_job.run_safely, description="Pangolin site check")
        scheduler.start()

        stop_event = asyncio.Event()
        _install_signal_handlers(stop_event)
        await stop_event.wait()

    finally:
        logger.info("Shutting down...")
        if scheduler:
            scheduler.shutdown()
        await probe_client.aclose()


def _install_signal_handlers(stop_event: asyncio.Event):
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            logger.debug(f"Signal handler for {sig.name} not supported on this platform")


def cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Email alerts for Pangolin site state changes")
    parser.add_argument("--config", default=None, help="Optional YAML file with the same keys as the env variables")
    parser.add_argument("--once", action="store_true", help="Run a single check cycle and exit")
    args = parser.parse_args(argv)

    load_dotenv()

    try:
        config: MonitorConfig = ConfigManager.load_monitor_config(args.config)
        build_cron_trigger(config.CRON_SCHEDULE)
        scheduler: CronScheduler | None = None if args.once else CronScheduler(config.CRON_SCHEDULE)
    except ConfigError as e:
        setup_logging()
        logger.error(f"config error: {e}")
        return 1

    setup_logging(
        log_level=config.LOGGING.LEVEL,
        log_to_file=config.LOGGING.TO_FILE,
        log_dir=config.LOGGING.DIR,
    )

    try:
        asyncio.run(main(config, scheduler=scheduler, once=args.once))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(cli())

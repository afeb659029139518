import structlog

from src.models.status_report import StatusReport, ServiceObservations

logger = structlog.get_logger()


class StatusReporter:
    """
    Base for components that can check their own dependencies, e.g. the object store gateway
    checking its bucket. Every imported subclass contributes to /status and /health.
    """
    label = 'status'

    @classmethod
    def get_status(cls) -> ServiceObservations:
        raise NotImplementedError()


async def get_status() -> StatusReport:
    """
    Runs every StatusReporter subclass. A reporter that raises is reported as a failed 'generation' check.
    """
    report = StatusReport()
    for reporter in StatusReporter.__subclasses__():
        try:
            report.services.append(reporter.get_status())
        except Exception as error:
            logger.error(f'Error gathering {reporter.label} status {error.__class__.__name__} {error}')
            so = ServiceObservations(label=reporter.label)
            so.add_check('generation')
            report.services.append(so)
    return report

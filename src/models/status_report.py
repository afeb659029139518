from typing import List
from enum import Enum

from pydantic import BaseModel, Field


class Outcome(str, Enum):
    failure = 'failure'
    success = 'success'


class CheckObservation(BaseModel):
    """
    One named check, such as the object store being 'configured' or 'reachable'.
    """
    phenomenon: str
    outcome: Outcome = Outcome.failure


class ServiceObservations(BaseModel):
    """
    The checks made against one dependency of the upload service, e.g. label 'storage'.
    """
    label: str = 'service'
    observations: list[CheckObservation] = Field(default_factory=list)

    def add_check(self, phenomenon: str) -> CheckObservation:
        """
        Adds a check that starts as a failure. The reporter marks it a success only once the
        check has passed, so a reporter that raises part way still reports the unmade checks
        as failed.
        """
        obs = CheckObservation(phenomenon=phenomenon)
        self.observations.append(obs)
        return obs

    def add_checks(self, *phenomena: str) -> List[CheckObservation]:
        """
        ```
        storage = ServiceObservations(label='storage')
        configured, reachable = storage.add_checks('configured', 'reachable')
        ```
        """
        return [self.add_check(phenomenon=phenomenon) for phenomenon in phenomena]

    def has_failures(self) -> bool:
        return any(obs.outcome == Outcome.failure for obs in self.observations)


class StatusReport(BaseModel):
    """
    Body of GET /status. GET /health answers 503 when has_failures() is true.
    """
    services: List[ServiceObservations] = Field(default_factory=list)

    def has_failures(self) -> bool:
        return any(so.has_failures() for so in self.services)

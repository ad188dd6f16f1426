from fieldreports.models.region import Region
from fieldreports.models.user import Role, User
from fieldreports.models.customer import Customer
from fieldreports.models.spare_part import SparePart
from fieldreports.models.sequence_counter import SequenceCounter
from fieldreports.models.service_report import (
    JobCompleted,
    MachineType,
    ServiceReport,
    ServiceType,
    service_report_spares,
)

__all__ = [
    "Customer",
    "JobCompleted",
    "MachineType",
    "Region",
    "Role",
    "SequenceCounter",
    "ServiceReport",
    "ServiceType",
    "SparePart",
    "User",
    "service_report_spares",
]
